#!/usr/bin/env python3

import argparse
import json
import os
from datetime import datetime
from pathlib import Path

import pytest

from reporting import archive_files, attach_screenshots, log_to_csv, results_from_junit, summarize, write_html_report


TESTS_DIR = Path(__file__).resolve().parent.parent / "tests" / "e2e"


def build_env(args: argparse.Namespace, artifacts_dir: Path) -> dict[str, str]:
    env = {
        "E2E_LIVE": "1",
        "E2E_ARTIFACTS_DIR": str(artifacts_dir),
        "E2E_HEADLESS": "false" if args.headful else "true",
        "E2E_VERBOSE": "true" if args.verbose else "false",
    }
    if args.base_url:
        env["E2E_BASE_URL"] = args.base_url
    if args.slowmo:
        env["E2E_SLOWMO"] = str(args.slowmo)
    if args.channel:
        env["E2E_BROWSER_CHANNEL"] = args.channel
    if args.otp_mode:
        env["E2E_OTP_MODE"] = args.otp_mode
    if args.no_saved_state:
        env["E2E_USE_SAVED_STATE"] = "false"
    return env


def build_pytest_args(args: argparse.Namespace, junit_path: Path) -> list[str]:
    pytest_args = [str(TESTS_DIR), f"--junitxml={junit_path}", "-o", "junit_logging=system-out", "-p", "no:cacheprovider"]
    if args.marker:
        pytest_args += ["-m", args.marker]
    if args.keyword:
        pytest_args += ["-k", args.keyword]
    if args.retries:
        pytest_args += ["--reruns", str(args.retries)]
    if args.workers and args.workers > 1:
        pytest_args += ["-n", str(args.workers)]
    if args.timeout:
        pytest_args += ["--timeout", str(args.timeout)]
    if args.verbose:
        pytest_args += ["-v", "-s"]
    if args.dry_run:
        pytest_args += ["--collect-only", "-q"]
    return pytest_args


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the end-to-end UI suite against a live deployment")
    parser.add_argument("--base-url", help="Base URL under test (defaults to E2E_BASE_URL)")
    parser.add_argument("-m", "--marker", help="Only run tests matching this marker expression, e.g. 'smoke or critical'")
    parser.add_argument("-k", "--keyword", help="Only run tests matching this keyword expression")
    parser.add_argument("--headful", action="store_true", help="Run browser headful for debugging")
    parser.add_argument("--verbose", action="store_true", help="Print the step trail of every test")
    parser.add_argument("--slowmo", type=int, default=0, help="Slow-motion delay between browser actions (ms)")
    parser.add_argument("--channel", help="Browser channel, e.g. chrome")
    parser.add_argument("--otp-mode", choices=["code", "manual"], help="How verification codes are entered")
    parser.add_argument("--no-saved-state", action="store_true", help="Always log in fresh instead of reusing the saved session")
    parser.add_argument("--retries", type=int, default=2 if os.environ.get("CI") else 0, help="Rerun failed tests this many times")
    parser.add_argument("--workers", type=int, default=1, help="Parallel workers (needs pytest-xdist)")
    parser.add_argument("--timeout", type=int, default=180, help="Per-test timeout in seconds")
    parser.add_argument("--dry-run", action="store_true", help="Only collect tests, do not execute")

    args = parser.parse_args(argv)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(f"data/runs/run_{timestamp}")
    artifacts_dir = run_dir / "artifacts"
    run_dir.mkdir(parents=True, exist_ok=True)

    os.environ.update(build_env(args, artifacts_dir))
    junit_path = run_dir / "junit.xml"

    print(f"🏃 Running E2E suite against {os.environ.get('E2E_BASE_URL', '(default base URL)')}...")
    exit_code = int(pytest.main(build_pytest_args(args, junit_path)))

    artifacts = {"exit_code": exit_code}
    results_json = {"tests": []}
    if junit_path.exists():
        results_json = results_from_junit(junit_path)
        attach_screenshots(results_json, artifacts_dir / "screenshots", run_dir)

    results_path = run_dir / "results.json"
    with open(results_path, "w", encoding="utf-8") as f:
        json.dump(results_json, f, indent=2)
    print(f"📊 Results written: {results_path}")
    artifacts["results"] = results_path

    report_path = run_dir / "report.html"
    write_html_report(results_json, report_path)
    artifacts["report"] = report_path
    print(f"📝 HTML report: {report_path}")

    archive_path = run_dir / "archive.zip"
    archive_files(archive_path, [junit_path, results_path, report_path])
    artifacts["archive"] = archive_path
    print(f"📦 Archive: {archive_path}")

    log_to_csv(Path("data/runs/run_log.csv"), timestamp, artifacts)

    counts = summarize(results_json)
    if counts["total"]:
        print(f"✅ Done. Total: {counts['total']}, Passed: {counts['passed']}, Failed: {counts['failed']}, Skipped: {counts['skipped']}")
    else:
        print("✅ Done. No tests executed (dry run or empty selection).")
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())

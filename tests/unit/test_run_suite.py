import argparse
from pathlib import Path
from unittest.mock import patch

import run_suite


def make_args(**overrides):
    values = dict(
        base_url=None,
        marker=None,
        keyword=None,
        headful=False,
        verbose=False,
        slowmo=0,
        channel=None,
        otp_mode=None,
        no_saved_state=False,
        retries=0,
        workers=1,
        timeout=180,
        dry_run=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def test_env_defaults_to_headless_live_run(tmp_path):
    env = run_suite.build_env(make_args(), tmp_path)
    assert env["E2E_LIVE"] == "1"
    assert env["E2E_HEADLESS"] == "true"
    assert env["E2E_ARTIFACTS_DIR"] == str(tmp_path)
    assert "E2E_BASE_URL" not in env


def test_env_forwards_options(tmp_path):
    env = run_suite.build_env(
        make_args(base_url="https://staging.test", headful=True, slowmo=100, otp_mode="manual", no_saved_state=True),
        tmp_path,
    )
    assert env["E2E_BASE_URL"] == "https://staging.test"
    assert env["E2E_HEADLESS"] == "false"
    assert env["E2E_SLOWMO"] == "100"
    assert env["E2E_OTP_MODE"] == "manual"
    assert env["E2E_USE_SAVED_STATE"] == "false"


def test_pytest_args():
    junit = Path("junit.xml")
    args = run_suite.build_pytest_args(make_args(marker="smoke", retries=2, workers=4, verbose=True), junit)

    assert args[0] == str(run_suite.TESTS_DIR)
    assert "--junitxml=junit.xml" in args
    assert args[args.index("-m") + 1] == "smoke"
    assert args[args.index("--reruns") + 1] == "2"
    assert args[args.index("-n") + 1] == "4"
    assert args[args.index("--timeout") + 1] == "180"
    assert "-s" in args


def test_single_worker_and_no_retries_add_no_plugin_flags():
    args = run_suite.build_pytest_args(make_args(), Path("junit.xml"))
    assert "-n" not in args
    assert "--reruns" not in args


def test_main_writes_run_artifacts(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("E2E_LIVE", "E2E_ARTIFACTS_DIR", "E2E_HEADLESS", "E2E_VERBOSE"):
        monkeypatch.setenv(name, "")

    def fake_pytest_main(args):
        junit = Path(next(a for a in args if a.startswith("--junitxml=")).split("=", 1)[1])
        junit.write_text(
            '<testsuites><testsuite><testcase classname="t" name="test_ok" time="1"/></testsuite></testsuites>',
            encoding="utf-8",
        )
        return 0

    with patch.object(run_suite.pytest, "main", side_effect=fake_pytest_main):
        assert run_suite.main(["--dry-run"]) == 0

    run_dir = next((tmp_path / "data" / "runs").glob("run_*"))
    assert (run_dir / "results.json").exists()
    assert (run_dir / "report.html").exists()
    assert (run_dir / "archive.zip").exists()
    assert (tmp_path / "data" / "runs" / "run_log.csv").exists()

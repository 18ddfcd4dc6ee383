import csv
import html
import re
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path


def results_from_junit(junit_path: Path) -> dict:
    """Flatten a pytest JUnit XML file into {"tests": [...]}."""
    tests = []
    root = ET.parse(junit_path).getroot()
    for case in root.iter("testcase"):
        status = "passed"
        error = ""
        for tag in ("failure", "error"):
            node = case.find(tag)
            if node is not None:
                status = "failed"
                error = (node.get("message") or "") + ("\n" + node.text if node.text else "")
                break
        skipped = case.find("skipped")
        if status == "passed" and skipped is not None:
            status = "skipped"
            error = skipped.get("message") or ""
        output = case.find("system-out")
        tests.append({
            "name": f"{case.get('classname', '')}::{case.get('name', '')}".strip(":"),
            "status": status,
            "duration": float(case.get("time") or 0),
            "error": error.strip(),
            "steps": (output.text or "").splitlines() if output is not None else [],
        })
    return {"tests": tests}


def summarize(results_json: dict) -> dict:
    tests = results_json.get("tests", [])
    return {
        "total": len(tests),
        "passed": sum(1 for r in tests if r.get("status") == "passed"),
        "failed": sum(1 for r in tests if r.get("status") == "failed"),
        "skipped": sum(1 for r in tests if r.get("status") == "skipped"),
    }


def write_html_report(results_json: dict, html_path: Path, title: str = "E2E Test Report"):
    counts = summarize(results_json)

    report = f"""
<html><head><title>{html.escape(title)}</title>
<style>
body {{ font-family: Arial, sans-serif; padding: 20px; }}
.summary {{ margin-bottom: 16px; }}
.pass {{ color: #0a7b44; }}
.fail {{ color: #b00020; }}
.skip {{ color: #8a6d00; }}
pre {{ background: #f6f8fa; padding: 12px; border-radius: 6px; overflow: auto; }}
</style>
</head><body>
  <h1>{html.escape(title)}</h1>
  <div class="summary">
    <strong>Total:</strong> {counts['total']} &nbsp; <strong class="pass">Passed:</strong> {counts['passed']} &nbsp; <strong class="fail">Failed:</strong> {counts['failed']} &nbsp; <strong class="skip">Skipped:</strong> {counts['skipped']}
  </div>
  <hr />
  {''.join(render_test_result(tr) for tr in results_json.get('tests', []))}
</body></html>
"""
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(report)


def render_test_result(test_result: dict) -> str:
    status = test_result.get("status", "unknown")
    status_class = {"passed": "pass", "failed": "fail", "skipped": "skip"}.get(status, "fail")
    name = html.escape(test_result.get("name", "Unnamed Test"))
    error = test_result.get("error", "")
    screenshot = test_result.get("screenshot", "")
    steps_rendered = html.escape("\n".join(test_result.get("steps", [])))
    img_tag = f"<div><img src=\"{html.escape(screenshot)}\" style=\"max-width: 100%; border: 1px solid #ddd;\" /></div>" if screenshot else ""
    error_block = f"<pre>{html.escape(error)}</pre>" if error else ""
    return f"""
  <section>
    <h3 class="{status_class}">{name} — {status.upper()}</h3>
    <details>
      <summary>Step trail</summary>
      <pre>{steps_rendered}</pre>
    </details>
    {img_tag}
    {error_block}
  </section>
  <hr />
"""


def screenshot_slug(test_name: str) -> str:
    return re.sub(r"[^\w-]+", "_", test_name).strip("_").lower()[:100] or "failure"


def attach_screenshots(results_json: dict, screenshots_dir: Path, report_dir: Path) -> None:
    """Link failure screenshots (named after the test) into the results.

    Links are relative to ``report_dir`` so report.html finds them.
    """
    if not screenshots_dir.exists():
        return
    shots = {p.stem: p for p in screenshots_dir.glob("*.png")}
    for r in results_json.get("tests", []):
        if r.get("status") != "failed":
            continue
        shot = shots.get(screenshot_slug(r.get("name", "").rsplit("::", 1)[-1]))
        if shot is not None:
            r["screenshot"] = shot.relative_to(report_dir).as_posix()


def archive_files(zip_path: Path, files: list[Path]):
    with zipfile.ZipFile(zip_path, "w") as zf:
        for f in files:
            if f.exists():
                zf.write(f, arcname=f.name)


def log_to_csv(log_path: Path, timestamp: str, artifacts: dict):
    csv_exists = log_path.exists()
    with open(log_path, "a", newline="") as csvfile:
        writer = csv.writer(csvfile)
        if not csv_exists:
            writer.writerow(["Timestamp", "Exit Code", "Results", "Report", "Archive"])
        writer.writerow([
            timestamp,
            str(artifacts.get("exit_code")),
            str(artifacts.get("results")),
            str(artifacts.get("report")),
            str(artifacts.get("archive")),
        ])

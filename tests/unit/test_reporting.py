import csv
import zipfile

from reporting import (
    archive_files,
    attach_screenshots,
    log_to_csv,
    render_test_result,
    results_from_junit,
    summarize,
    write_html_report,
)


JUNIT = """<?xml version="1.0" encoding="utf-8"?>
<testsuites><testsuite name="pytest" tests="3">
  <testcase classname="tests.e2e.test_auth" name="test_valid_login" time="12.5">
    <system-out>→ Submitted credentials
✓ Authenticated</system-out>
  </testcase>
  <testcase classname="tests.e2e.test_documents" name="test_upload_document" time="30.1">
    <failure message="AssertionError: uploaded file not listed">assert False</failure>
  </testcase>
  <testcase classname="tests.e2e.test_chat" name="test_export_chat" time="0.01">
    <skipped message="export not offered" />
  </testcase>
</testsuite></testsuites>
"""


def write_junit(tmp_path):
    path = tmp_path / "junit.xml"
    path.write_text(JUNIT, encoding="utf-8")
    return path


def test_results_from_junit(tmp_path):
    tests = results_from_junit(write_junit(tmp_path))["tests"]

    assert [t["status"] for t in tests] == ["passed", "failed", "skipped"]
    assert tests[0]["name"] == "tests.e2e.test_auth::test_valid_login"
    assert tests[0]["steps"] == ["→ Submitted credentials", "✓ Authenticated"]
    assert "uploaded file not listed" in tests[1]["error"]
    assert tests[2]["error"] == "export not offered"


def test_summarize_counts(tmp_path):
    assert summarize(results_from_junit(write_junit(tmp_path))) == {"total": 3, "passed": 1, "failed": 1, "skipped": 1}


def test_html_report_escapes_content(tmp_path):
    results = {"tests": [{"name": "t::<script>", "status": "failed", "error": "<b>boom</b>", "steps": []}]}
    path = tmp_path / "report.html"

    write_html_report(results, path)

    body = path.read_text(encoding="utf-8")
    assert "&lt;script&gt;" in body
    assert "<b>boom</b>" not in body
    assert "Failed:</strong> 1" in body


def test_render_includes_screenshot():
    html = render_test_result({"name": "t", "status": "failed", "screenshot": "shots/t.png"})
    assert 'src="shots/t.png"' in html


def test_attach_screenshots_only_to_failures(tmp_path):
    shots = tmp_path / "artifacts" / "screenshots"
    shots.mkdir(parents=True)
    (shots / "test_upload_document.png").write_bytes(b"")
    (shots / "test_valid_login.png").write_bytes(b"")
    results = results_from_junit(write_junit(tmp_path))

    attach_screenshots(results, shots, tmp_path)

    assert results["tests"][1]["screenshot"] == "artifacts/screenshots/test_upload_document.png"
    assert "screenshot" not in results["tests"][0]


def test_attach_screenshots_needs_the_exact_test_name(tmp_path):
    shots = tmp_path / "screenshots"
    shots.mkdir()
    (shots / "test_upload_document_twice.png").write_bytes(b"")
    (shots / "test_login_bad_param-x.png").write_bytes(b"")
    results = {"tests": [
        {"name": "tests.e2e.test_documents::test_upload_document", "status": "failed"},
        {"name": "tests.e2e.test_auth::test_login_bad[param-x]", "status": "failed"},
    ]}

    attach_screenshots(results, shots, tmp_path)

    assert "screenshot" not in results["tests"][0]
    assert results["tests"][1]["screenshot"] == "screenshots/test_login_bad_param-x.png"


def test_archive_skips_missing_files(tmp_path):
    present = tmp_path / "a.txt"
    present.write_text("x")
    archive = tmp_path / "out.zip"

    archive_files(archive, [present, tmp_path / "missing.txt"])

    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["a.txt"]


def test_csv_log_writes_header_once(tmp_path):
    log = tmp_path / "run_log.csv"
    log_to_csv(log, "20260101_000000", {"exit_code": 0, "results": "r.json"})
    log_to_csv(log, "20260101_000100", {"exit_code": 1})

    with open(log, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Timestamp", "Exit Code", "Results", "Report", "Archive"]
    assert [r[1] for r in rows[1:]] == ["0", "1"]

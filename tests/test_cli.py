"""Tests for the command line front end."""

import json
import logging

import pytest

import cli
import core


@pytest.fixture
def report_args(sample_report):
    return ["--report-file", str(sample_report)]


def test_summary_is_default(report_args, capsys):
    status = cli.main(report_args)

    out = capsys.readouterr().out
    assert status == 0
    assert "JUnit Failures Summary" in out
    assert "[1] com.example.ExampleTests (3 failures, 0.011s)" in out
    assert out.endswith("Total Failures: 5\n")


def test_summary_command(report_args, capsys):
    assert cli.main(report_args + ["summary"]) == 0
    assert "Total Failures: 5" in capsys.readouterr().out


def test_fail_on_summary(report_args, capsys):
    assert cli.main(report_args + ["--fail-on-summary"]) == 1
    assert "Total Failures: 5" in capsys.readouterr().out


def test_fail_on_summary_from_environment(report_args, monkeypatch):
    monkeypatch.setenv("JUNIT_FAIL_ON_SUMMARY", "true")
    assert cli.main(report_args) == 1


def test_details_group(report_args, capsys):
    assert cli.main(report_args + ["details", "2"]) == 0

    out = capsys.readouterr().out
    assert "[2] com.example.MoreTests" in out
    assert "[2.2] Test: verifyMore(String)[4]" in out


def test_details_failure(report_args, capsys):
    assert cli.main(report_args + ["details", "1.3"]) == 0

    out = capsys.readouterr().out
    assert "[1.3] Test: verifyHelloFoo()" in out
    assert "    - Trace:\n" in out


def test_all(report_args, capsys):
    assert cli.main(report_args + ["all"]) == 0

    out = capsys.readouterr().out
    assert "[1.1] Test: verifyFail(String)[1]" in out
    assert "[2.2] Test: verifyMore(String)[4]" in out
    assert "JUnit Failures Summary" not in out


def test_json_format(report_args, capsys):
    assert cli.main(report_args + ["--format", "json"]) == 0
    assert json.loads(capsys.readouterr().out)["total_failures"] == 5


@pytest.mark.parametrize("index", ["abc", "1.", "1.2.3", "-1"])
def test_details_rejects_malformed_index(report_args, index, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(report_args + ["details", index])
    assert exc_info.value.code == 2
    assert "invalid index" in capsys.readouterr().err


def test_details_index_out_of_range(report_args, caplog, capsys):
    with caplog.at_level(logging.ERROR):
        status = cli.main(report_args + ["details", "5"])

    assert status == 1
    assert "The group index is out of bounds" in caplog.text
    assert capsys.readouterr().out == ""


def test_failure_index_out_of_range(report_args, caplog):
    with caplog.at_level(logging.ERROR):
        assert cli.main(report_args + ["details", "1.9"]) == 1
    assert "The failure index is out of bounds" in caplog.text


def test_missing_report_is_logged(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        status = cli.main(["--report-file", str(tmp_path / "missing.xml")])

    assert status == 1
    assert "Failed to parse JUnit report: File does not exist" in caplog.text


def test_malformed_report_is_logged(write_report, caplog):
    path = write_report("<testsuite><testcase")

    with caplog.at_level(logging.ERROR):
        assert cli.main(["--report-file", str(path)]) == 1
    assert "Failed to parse JUnit report: Failed to parse XML file" in caplog.text


def test_silent_suppresses_error_logs(tmp_path, caplog):
    with caplog.at_level(logging.DEBUG):
        status = cli.main(["--silent", "--report-file", str(tmp_path / "missing.xml")])

    assert status == 1
    assert [r for r in caplog.records if r.levelno >= logging.ERROR] == []


def test_unexpected_error_is_logged(report_args, monkeypatch, caplog):
    def boom(**kwargs):
        raise RuntimeError("something broke")

    monkeypatch.setattr(core, "run_report", boom)

    with caplog.at_level(logging.ERROR):
        assert cli.main(report_args) == 1
    assert "Unexpected error: something broke" in caplog.text


def test_empty_report_succeeds(write_report, capsys):
    path = write_report("<testsuite/>")

    assert cli.main(["--report-file", str(path), "--fail-on-summary"]) == 0
    assert capsys.readouterr().out == ""


def test_default_report_location(tmp_path, sample_report, capsys):
    report_dir = tmp_path / "out" / "test-results" / "test"
    report_dir.mkdir(parents=True)
    (report_dir / "TEST-junit-jupiter.xml").write_bytes(sample_report.read_bytes())

    assert cli.main(["--build-dir", str(tmp_path / "out")]) == 0
    assert "Total Failures: 5" in capsys.readouterr().out

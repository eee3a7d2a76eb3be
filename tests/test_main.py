# tests/test_main.py
"""
Tests for the javatrace command-line interface.
"""

import io
import json
import logging

import pytest

from javatrace import __version__
from javatrace.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main
from tests.conftest import COUNTER_JAVA, MISMATCHED_JAVA, SCENARIO_A, SCENARIO_B


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("javatrace")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def java_file(tmp_path):
    def write(source, name="Snippet.java"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)
    return write


class TestAnalyze:

    def test_json_output(self, java_file, capsys):
        assert main(["analyze", java_file(COUNTER_JAVA)]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["controlFlow"]["methodName"] == "main"
        assert len(data["executionTraces"]) == 13

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(SCENARIO_A))
        assert main(["analyze", "-"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["executionTraces"][-1]["value"] == 10

    def test_summary_format(self, java_file, capsys):
        assert main(["analyse", java_file(SCENARIO_B), "--format", "summary", "--loop-bound", "2"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "method:    main(String[] args)" in out
        assert "strategy:  wrap-in-main" in out
        assert "recursion: no" in out
        assert "iteration cap (2)" in out

    def test_output_file(self, java_file, tmp_path):
        target = tmp_path / "out" / "result.json"
        assert main(["analyze", java_file(SCENARIO_A), "-o", str(target), "--indent", "0"]) == EXIT_OK
        assert json.loads(target.read_text(encoding="utf-8"))["success"] is True

    def test_non_finite_doubles_are_strings(self, java_file, capsys):
        source = "double d = 1.0 / 0; double e = 0.0 / 0; return -d;"
        assert main(["analyze", java_file(source)]) == EXIT_OK
        out = capsys.readouterr().out
        assert "NaN" not in out.replace('"NaN"', "")
        data = json.loads(out)
        last = data["executionTraces"][-1]
        assert last["value"] == "-Infinity"
        assert last["variables"]["d"] == "Infinity"
        assert last["variables"]["e"] == "NaN"

    def test_analysis_failure(self, java_file, capsys):
        assert main(["analyze", java_file(MISMATCHED_JAVA)]) == EXIT_ERROR
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is False
        assert data["error"].startswith("All parsing strategies failed")

    def test_analysis_failure_summary(self, java_file, capsys):
        assert main(["analyze", java_file(MISMATCHED_JAVA), "-f", "summary"]) == EXIT_ERROR
        assert capsys.readouterr().out.startswith("error: All parsing strategies failed")

    def test_invalid_bound(self, java_file):
        assert main(["analyze", java_file(SCENARIO_A), "--loop-bound", "0"]) == EXIT_INFRA

    def test_missing_file(self, tmp_path):
        assert main(["analyze", str(tmp_path / "absent.java")]) == EXIT_INFRA


class TestParse:

    def test_sexp(self, java_file, capsys):
        assert main(["parse", java_file(COUNTER_JAVA)]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith(";; strategy: strict\n")
        assert "(CompilationUnit" in out

    def test_summary(self, java_file, capsys):
        assert main(["parse", java_file(COUNTER_JAVA), "-f", "summary"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "void main(String[] args)  [line 2]" in out

    def test_wrapped_snippet_warns(self, java_file, capsys):
        assert main(["parse", java_file(SCENARIO_A), "--locations"]) == EXIT_OK
        out = capsys.readouterr().out
        assert ";; strategy: wrap-in-main" in out
        assert ";; warning: Code was automatically wrapped in a main method" in out

    def test_failure_lists_attempts(self, java_file, capsys):
        assert main(["parse", java_file(MISMATCHED_JAVA)]) == EXIT_ERROR
        out = capsys.readouterr().out
        assert ";; strict: " in out
        assert ";; wrap-in-main: " in out


class TestEntryPoint:

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == EXIT_INFRA
        assert "usage:" in capsys.readouterr().err

    def test_verbose_installs_handler(self, java_file):
        main(["-vv", "analyze", java_file(SCENARIO_A)])
        logger = logging.getLogger("javatrace")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

"""
Tests for the command line interface.
"""

import json
from unittest.mock import patch

import pytest

from orchestrator.cli import create_parser, main, parse_answers, parse_filters, validate_args
from tests.helpers import make_answers, make_row


@pytest.fixture
def rows_file(tmp_path):
    path = tmp_path / "rows.json"
    rows = [make_row(f"r{i}", department="Ops") for i in range(3)]
    rows.append(make_row("r9", 0, 3, department="Ops"))
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_logging():
    # keep the root logger untouched between tests
    with patch("orchestrator.cli.setup_logging"):
        yield


def parse(*argv):
    return create_parser().parse_args(list(argv))


# ============================================================
# ARGUMENTS
# ============================================================

class TestValidateArgs:
    """Tests for validate_args."""

    def test_score_requires_answers(self):
        assert validate_args(parse("score")) == ["--answers is required for the score operation"]

    def test_rows_required(self):
        assert validate_args(parse("trends")) == ["--rows is required for the trends operation"]

    def test_rows_file_must_exist(self, tmp_path):
        errors = validate_args(parse("trends", "--rows", str(tmp_path / "missing.json")))
        assert errors[0].startswith("--rows file not found")

    def test_every_problem_reported(self, rows_file):
        args = parse(
            "segmentation",
            "--rows", str(rows_file),
            "--filter", "department",
            "--group-by", "salary",
            "--limit", "0",
        )
        assert len(validate_args(args)) == 3

    def test_valid(self, rows_file):
        args = parse("heatmap", "--rows", str(rows_file), "--filter", "turno=Day", "--group-by", "shift")
        assert validate_args(args) == []

    def test_unknown_operation_rejected(self):
        with pytest.raises(SystemExit):
            parse("forecast")


class TestParsing:
    """Tests for filter and answer parsing."""

    def test_parse_filters(self):
        assert parse_filters(["department = Ops", "startDate=2024-01-01"]) == {
            "department": "Ops",
            "startDate": "2024-01-01",
        }

    def test_parse_answers(self):
        assert parse_answers('{"1": 3, "q2": 0, "extra": 1}') == {1: 3, 2: 0, "extra": 1}

    def test_parse_answers_requires_object(self):
        with pytest.raises(ValueError):
            parse_answers("[1, 2, 3]")


# ============================================================
# MAIN
# ============================================================

class TestMain:
    """Tests for main()."""

    def test_core_metrics(self, rows_file, capsys):
        exit_code = main(["core_metrics", "--rows", str(rows_file)])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["success"] is True
        assert output["data"]["totalResponses"] == 4
        assert output["data"]["risk"]["highRiskCount"] == 1

    def test_segmentation_with_filter(self, rows_file, capsys):
        exit_code = main(["segmentation", "--rows", str(rows_file), "--filter", "turno=Day"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["data"]["groupBy"] == "department"
        assert output["data"]["segments"][0]["key"] == "Ops"

    def test_invalid_filter_value_exits_non_zero(self, rows_file, capsys):
        exit_code = main(["trends", "--rows", str(rows_file), "--filter", "color=red"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert output["success"] is False
        assert output["errors"] == ["Unknown filter 'color'"]

    def test_score(self, capsys):
        answers = json.dumps({str(q): v for q, v in make_answers(2, 1).items()})

        exit_code = main(["score", "--answers", answers])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["score"]["total"] == 24
        assert output["risk"]["band"] == "MODERATE"

    def test_argument_errors_go_to_stderr(self, capsys):
        exit_code = main(["score"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert "--answers is required" in captured.err

    def test_unreadable_rows_file(self, tmp_path, capsys):
        path = tmp_path / "rows.json"
        path.write_text('{"not": "a list"}', encoding="utf-8")

        assert main(["core_metrics", "--rows", str(path)]) == 1

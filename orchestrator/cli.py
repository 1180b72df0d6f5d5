"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the wellbeing analytics engine.

- Provides argparse-based CLI
- Runs one operation over a JSON file of questionnaire rows
- Loads configuration from CLI and environment
- Prints the result envelope as JSON on stdout

Logs and the banner go to stderr so stdout stays parseable.

============================================================
USAGE
============================================================
python -m orchestrator.cli score --answers '{"1": 3, "2": 0, ...}'
python -m orchestrator.cli core_metrics --rows rows.json
python -m orchestrator.cli segmentation --rows rows.json --group-by shift
python -m orchestrator.cli heatmap --rows rows.json --filter department=Operations

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from data_ingestion.normalizers.response_normalizer import question_index
from data_ingestion.stores.memory import InMemoryDataStore
from segmentation.config import GROUPABLE_FIELDS

from .core import create_orchestrator, setup_logging
from .models import MetricsOperation, OrchestratorConfig


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wellbeing-analytics",
        description="GHQ-12 wellbeing survey analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Operations:
  score                - Score one answer set (no data store)
  core_metrics         - Risk distribution and distress average
  correlations         - Configured variable-pair correlations
  segmentation         - Per-segment aggregates
  trends               - Monthly trend series
  heatmap              - Question x group answer distribution
  at_risk_respondents  - Latest response per respondent by risk band

Examples:
  %(prog)s core_metrics --rows rows.json
  %(prog)s segmentation --rows rows.json --group-by shift
  %(prog)s trends --rows rows.json --filter startDate=2024-01-01
        """
    )

    parser.add_argument(
        "operation",
        type=str,
        choices=[op.value for op in MetricsOperation],
        help="Operation to run",
    )

    # --------------------------------------------------------
    # Input Options
    # --------------------------------------------------------
    input_group = parser.add_argument_group("Input Options")

    input_group.add_argument(
        "--rows",
        type=str,
        metavar="PATH",
        help="JSON file with a list of questionnaire rows",
    )

    input_group.add_argument(
        "--answers",
        type=str,
        metavar="JSON",
        help="Answer set for the score operation, e.g. '{\"1\": 3, \"2\": 0}'",
    )

    # --------------------------------------------------------
    # Query Options
    # --------------------------------------------------------
    query_group = parser.add_argument_group("Query Options")

    query_group.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Filter (repeatable): department, shift, gender, position, startDate, endDate",
    )

    query_group.add_argument(
        "--group-by",
        type=str,
        default=None,
        help="Grouping field for segmentation and heatmap",
    )

    query_group.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum respondents listed per band (at_risk_respondents)",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default="json",
        help="Logging format (default: json)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 0.1.0",
    )

    return parser


# ============================================================
# CLI VALIDATION
# ============================================================

def validate_args(args: argparse.Namespace) -> List[str]:
    """
    Validate CLI arguments.

    Args:
        args: Parsed arguments

    Returns:
        List of validation errors
    """
    errors = []

    operation = MetricsOperation(args.operation)

    if operation == MetricsOperation.SCORE:
        if not args.answers:
            errors.append("--answers is required for the score operation")
    else:
        if not args.rows:
            errors.append(f"--rows is required for the {operation.value} operation")
        elif not Path(args.rows).is_file():
            errors.append(f"--rows file not found: {args.rows}")

    for item in args.filter:
        if "=" not in item:
            errors.append(f"Invalid --filter '{item}', expected KEY=VALUE")

    if args.group_by is not None and args.group_by not in GROUPABLE_FIELDS:
        errors.append(f"--group-by must be one of {sorted(GROUPABLE_FIELDS)}")

    if args.limit is not None and args.limit < 1:
        errors.append("--limit must be at least 1")

    return errors


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> OrchestratorConfig:
    """Environment configuration with CLI logging overrides."""
    return replace(
        OrchestratorConfig.from_env(),
        log_level=args.log_level,
        log_format=args.log_format,
    )


def parse_filters(items: List[str]) -> Dict[str, str]:
    filters = {}
    for item in items:
        key, _, value = item.partition("=")
        filters[key.strip()] = value.strip()
    return filters


def parse_answers(text: str) -> Dict[Any, Any]:
    """Parse an answer-set JSON object; question keys become ints."""
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("--answers must be a JSON object")
    answers = {}
    for key, value in raw.items():
        index = question_index(key)
        answers[index if index is not None else key] = value
    return answers


def load_rows(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"{path} must contain a JSON list of rows")
    return rows


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(args: argparse.Namespace) -> int:
    """
    Async main entry point.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    config = build_config(args)
    operation = MetricsOperation(args.operation)

    try:
        rows = load_rows(args.rows) if args.rows else []
        store = InMemoryDataStore({config.responses_table: rows})
        orchestrator = create_orchestrator(store, config=config)

        if operation == MetricsOperation.SCORE:
            output = orchestrator.score_response(parse_answers(args.answers))
            print(json.dumps(output, indent=2, ensure_ascii=False))
            return 0 if output["success"] else 1

        filters = parse_filters(args.filter)
        if operation == MetricsOperation.CORE_METRICS:
            result = await orchestrator.get_core_metrics(filters)
        elif operation == MetricsOperation.CORRELATIONS:
            result = await orchestrator.get_correlations(filters)
        elif operation == MetricsOperation.SEGMENTATION:
            result = await orchestrator.get_segmentation(filters, group_by=args.group_by)
        elif operation == MetricsOperation.TRENDS:
            result = await orchestrator.get_trends(filters)
        elif operation == MetricsOperation.HEATMAP:
            result = await orchestrator.get_heatmap(filters, group_by=args.group_by)
        else:
            result = await orchestrator.get_at_risk_respondents(filters, limit=args.limit)

        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0 if result.success else 1

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    setup_logging(args.log_level, args.log_format, stream=sys.stderr)
    print_banner(args)

    return asyncio.run(async_main(args))


def print_banner(args: argparse.Namespace) -> None:
    """Print startup banner to stderr."""
    out = sys.stderr
    print(file=out)
    print("=" * 60, file=out)
    print("  WELLBEING ANALYTICS", file=out)
    print("  GHQ-12 Survey Metrics", file=out)
    print("=" * 60, file=out)
    print(f"  Operation:  {args.operation}", file=out)
    if args.rows:
        print(f"  Rows:       {args.rows}", file=out)
    if args.filter:
        print(f"  Filters:    {', '.join(args.filter)}", file=out)
    if args.group_by:
        print(f"  Group By:   {args.group_by}", file=out)
    print(f"  Log Level:  {args.log_level}", file=out)
    print("=" * 60, file=out)
    print(file=out)


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())

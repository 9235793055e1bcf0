"""
Oppscore CLI - Stock Opportunity Scoring Command Line Interface.

Usage:
    python cli.py interpret FILE [--as-of DATE]
    python cli.py evaluate [FILE | --preset NAME] [--set ID=LEVEL ...]
    python cli.py rank [FILE ...] [--presets]
    python cli.py factors [--format FORMAT]
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

from config import ConfigError, OppscoreConfig, get_config
from domain import (
    evaluate,
    evaluate_batch,
    interpret,
    merge_values,
    rank_evaluations,
)
from domain.engine import interpret_normalized
from domain.errors import ScorerError
from domain.factors import FACTORS, GROUPS, SectorTables
from domain.normalize import normalize_record
from domain.presets import PRESETS, get_preset
from presentation.json_api import factor_definitions_response, factor_values_to_json, to_json

logger = logging.getLogger(__name__)

NULL_LEVELS = {"", "none", "null", "-"}


def parse_override(text: str) -> tuple[str, str | None]:
    """Parse an ID=LEVEL override; LEVEL 'none' clears the factor."""
    factor_id, sep, level = text.partition("=")
    factor_id = factor_id.strip()
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ID=LEVEL, got {text!r}")
    if factor_id not in FACTORS:
        raise argparse.ArgumentTypeError(f"unknown factor {factor_id!r}")
    level = level.strip()
    return factor_id, None if level.lower() in NULL_LEVELS else level


def parse_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {text!r}")


def read_record(path: str) -> Any:
    """Load a raw provider record from a JSON file ('-' reads stdin)."""
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


def write_json(payload: Any, output: str | None) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output:
        Path(output).write_text(text)
        print(f"Written to {output}", file=sys.stderr)
    else:
        print(text)


def cmd_interpret(args: argparse.Namespace, config: OppscoreConfig, tables: SectorTables) -> int:
    """Interpret a raw record into factor readings."""
    raw = read_record(args.file)
    values = interpret(raw, tables=tables, as_of=args.as_of)
    write_json(factor_values_to_json(values), args.output)
    return 0


def cmd_evaluate(args: argparse.Namespace, config: OppscoreConfig, tables: SectorTables) -> int:
    """Evaluate one instrument."""
    overrides = dict(args.overrides or [])
    symbol = args.symbol

    if args.preset:
        try:
            preset = get_preset(args.preset)
        except KeyError as e:
            print(f"Error: {e.args[0]}", file=sys.stderr)
            return 1
        values = {**preset["values"], **overrides}
        symbol = symbol or args.preset.upper()
    elif args.file:
        record = normalize_record(read_record(args.file), as_of=args.as_of)
        auto = interpret_normalized(record, tables)
        values = merge_values(auto, manual_ids=overrides, manual_values=overrides)
        symbol = symbol or record.symbol
    else:
        values = overrides

    evaluation = evaluate(values, symbol=symbol)
    logger.info(f"{symbol or 'instrument'}: {evaluation.final} {evaluation.signal.label.value}")
    write_json(to_json(evaluation), args.output)
    return 0


def cmd_rank(args: argparse.Namespace, config: OppscoreConfig, tables: SectorTables) -> int:
    """Evaluate several instruments and list them best first."""
    items: dict[str, dict] = {}
    if args.presets:
        for key, preset in PRESETS.items():
            items[key] = preset["values"]
    for path in args.files:
        record = normalize_record(read_record(path), as_of=args.as_of)
        symbol = record.symbol or Path(path).stem
        if symbol in items:
            key = f"{symbol} ({path})"
            logger.warning(f"Duplicate symbol {symbol}: ranking {path} as {key!r}")
            symbol = key
        items[symbol] = merge_values(interpret_normalized(record, tables))

    if not items:
        print("Error: nothing to rank (pass files or --presets)", file=sys.stderr)
        return 1

    ranked = rank_evaluations(evaluate_batch(items, max_workers=config.batch.max_workers))

    if args.format == "json":
        write_json([to_json(e) for e in ranked], None)
        return 0

    for position, evaluation in enumerate(ranked, start=1):
        print(
            f"{position:>2}. {evaluation.symbol:<10} {evaluation.final:>3}  "
            f"{evaluation.signal.label.value:<11} {evaluation.recommendation.action.value}"
        )
        print(f"    {evaluation.confidence.value} | driver: {evaluation.narrative.primary_driver}")
    return 0


def cmd_factors(args: argparse.Namespace, config: OppscoreConfig, tables: SectorTables) -> int:
    """List factor ladders."""
    if args.format == "json":
        write_json([f.model_dump(mode="json") for f in factor_definitions_response()], None)
        return 0

    for group in GROUPS:
        print(f"\n## {group.name} (max {group.max_total:g})")
        for definition in group:
            print(f"\n{definition.id}: {definition.label}")
            for index, (value, anchor) in enumerate(zip(definition.values, definition.anchors)):
                print(f"  [{index}] {value:>2}  {anchor}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oppscore",
        description="Stock Opportunity Scoring",
    )
    parser.add_argument("-c", "--config", help="Path to TOML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Interpret command
    interpret_parser = subparsers.add_parser("interpret", help="Interpret a raw JSON record")
    interpret_parser.add_argument("file", help="Raw record JSON file ('-' for stdin)")
    interpret_parser.add_argument("--as-of", type=parse_date, help="Reference date for catalyst dates")
    interpret_parser.add_argument("-o", "--output", help="Output file path")
    interpret_parser.set_defaults(func=cmd_interpret)

    # Evaluate command
    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate one instrument")
    source = evaluate_parser.add_mutually_exclusive_group()
    source.add_argument("file", nargs="?", help="Raw record JSON file ('-' for stdin)")
    source.add_argument("-p", "--preset", help=f"Reference preset ({', '.join(PRESETS)})")
    evaluate_parser.add_argument(
        "-s", "--set",
        dest="overrides",
        action="append",
        type=parse_override,
        metavar="ID=LEVEL",
        help="Operator entry for a factor (repeatable)",
    )
    evaluate_parser.add_argument("--symbol", help="Instrument symbol")
    evaluate_parser.add_argument("--as-of", type=parse_date, help="Reference date for catalyst dates")
    evaluate_parser.add_argument("-o", "--output", help="Output file path")
    evaluate_parser.set_defaults(func=cmd_evaluate)

    # Rank command
    rank_parser = subparsers.add_parser("rank", help="Rank several instruments")
    rank_parser.add_argument("files", nargs="*", help="Raw record JSON files")
    rank_parser.add_argument("--presets", action="store_true", help="Include reference presets")
    rank_parser.add_argument("--as-of", type=parse_date, help="Reference date for catalyst dates")
    rank_parser.add_argument("-f", "--format", choices=["text", "json"], default="text", help="Output format")
    rank_parser.set_defaults(func=cmd_rank)

    # Factors command
    factors_parser = subparsers.add_parser("factors", help="List factor ladders")
    factors_parser.add_argument("-f", "--format", choices=["text", "json"], default="text", help="Output format")
    factors_parser.set_defaults(func=cmd_factors)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = get_config(args.config)
        tables = config.tables()
    except (ConfigError, ScorerError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level,
        format=config.logging.format,
    )

    try:
        return args.func(args, config, tables)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

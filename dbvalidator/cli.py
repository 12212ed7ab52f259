"""
Command line entry point.

  dbvalidator check NAME VALUE [VALUE ...] [--config PATH]
  dbvalidator exists --table T --field F (--sqlite PATH | --postgres DSN) VALUE

Exit codes: 0 all values valid, 1 at least one invalid, 2 configuration error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from adapters.db.base import DBAdapter
from dbvalidator.errors.exceptions import InvalidArgumentError, ValidatorError
from dbvalidator.factory import build_adapter, build_check, container_from_config
from dbvalidator.record_exists import NoRecordExists, RecordExists
from dbvalidator.settings import get_settings
from dbvalidator.validator import AbstractValidator

log = logging.getLogger(__name__)


def _parse_value(raw: str, as_int: bool) -> Any:
    if not as_int:
        return raw
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgumentError(f"Value is not an integer: {raw!r}") from None


def _run(validator: AbstractValidator, values: List[Any], as_json: bool) -> int:
    failures = 0
    for value in values:
        result = validator.validate(value)
        if not result.ok:
            failures += 1
        if as_json:
            print(
                json.dumps(
                    {"value": value, "ok": result.ok, "messages": result.messages},
                    ensure_ascii=False,
                )
            )
        elif result.ok:
            print(f"{value}: ok")
        else:
            for message in result.messages.values():
                print(f"{value}: {message}")
    return 1 if failures else 0


def _adapter_from_args(args: argparse.Namespace) -> DBAdapter:
    if args.postgres:
        return build_adapter({"kind": "postgres", "dsn": args.postgres})
    settings = get_settings()
    if args.sqlite:
        return build_adapter({"kind": "sqlite", "dsn": args.sqlite})
    if settings.db_mode == "postgres":
        return build_adapter({"kind": "postgres", "dsn": settings.postgres_dsn})
    return build_adapter({"kind": "sqlite", "dsn": settings.sqlite_path})


def cmd_check(args: argparse.Namespace) -> int:
    container = container_from_config(args.config or get_settings().config_path)
    validator = build_check(container, args.name)
    values = [_parse_value(v, args.int) for v in args.values]
    return _run(validator, values, args.json)


def cmd_exists(args: argparse.Namespace) -> int:
    options: Dict[str, Any] = {
        "adapter": _adapter_from_args(args),
        "table": args.table,
        "schema": args.schema,
        "field": args.field,
    }
    if args.exclude_field is not None:
        options["exclude"] = {"field": args.exclude_field, "value": args.exclude_value}

    cls = NoRecordExists if args.absent else RecordExists
    validator = cls(**options)
    values = [_parse_value(v, args.int) for v in args.values]
    return _run(validator, values, args.json)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbvalidator",
        description="Check whether database records matching a value exist.",
    )
    parser.add_argument("--log-level", default=None, help="Override DBV_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    def common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--int", action="store_true", help="Parse values as integers")
        p.add_argument("--json", action="store_true", help="Print one JSON object per value")

    p_check = sub.add_parser("check", help="Run a named check from the YAML config")
    p_check.add_argument("--config", default=None, help="Path to validators YAML")
    p_check.add_argument("name")
    p_check.add_argument("values", nargs="+")
    common(p_check)
    p_check.set_defaults(func=cmd_check)

    p_exists = sub.add_parser("exists", help="Ad-hoc record lookup")
    src = p_exists.add_mutually_exclusive_group()
    src.add_argument("--sqlite", default=None, help="Path to a SQLite database")
    src.add_argument("--postgres", default=None, help="Postgres DSN")
    p_exists.add_argument("--table", required=True)
    p_exists.add_argument("--schema", default=None)
    p_exists.add_argument("--field", required=True)
    p_exists.add_argument("--exclude-field", default=None)
    p_exists.add_argument("--exclude-value", default="")
    p_exists.add_argument(
        "--absent", action="store_true", help="Valid when NO record matches"
    )
    p_exists.add_argument("values", nargs="+")
    common(p_exists)
    p_exists.set_defaults(func=cmd_exists)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return int(args.func(args))
    except (ValidatorError, FileNotFoundError, ValueError) as e:
        log.debug("Command failed", exc_info=e)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

"""Command line interface for clogdump."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .api import (
    RECORD_KINDS,
    DumpOptions,
    dump_collection_log,
    inspect_record,
    validate_cache,
)
from .config import ExtractConfig, MissingItemPolicy, load_config
from .errors import ConfigError, ExtractError
from .logging import configure_logging, step
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _config_from_args(args: argparse.Namespace) -> ExtractConfig:
    config = load_config(args.config)
    overrides = {}
    if getattr(args, "missing_items", None):
        overrides["missing_items"] = MissingItemPolicy(args.missing_items)
    if getattr(args, "placeholder_name", None) is not None:
        overrides["placeholder_name"] = args.placeholder_name
    return config.with_overrides(**overrides) if overrides else config


def _dump_cmd(args: argparse.Namespace) -> int:
    opts = DumpOptions(
        cache_dir=args.cachedir,
        output_dir=args.outputdir,
        config=_config_from_args(args),
        manifest_path=args.emit_manifest,
    )
    result = dump_collection_log(opts)
    step(f"wrote {result.output_file}")
    return EXIT_OK


def _validate_cmd(args: argparse.Namespace) -> int:
    errors = validate_cache(args.cachedir, _config_from_args(args))
    rep = get_reporter()
    for err in errors:
        rep.error(str(err), code=err.code, context=err.context or {})
    if args.json:
        print(json.dumps([e.to_dict() for e in errors], indent=2))
    return EXIT_FAILED if errors else EXIT_OK


def _inspect_cmd(args: argparse.Namespace) -> int:
    record = inspect_record(args.cachedir, args.kind, args.id)
    print(json.dumps(record, indent=2, ensure_ascii=False))
    return EXIT_OK


def _add_cache_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--cachedir",
        type=Path,
        required=True,
        help="Cache dump directory (structs/items/enums indexes)",
    )


def _add_config_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        type=Path,
        help="JSON/YAML file overriding tab struct ids and param ids",
    )
    p.add_argument(
        "--missing-items",
        dest="missing_items",
        choices=[m.value for m in MissingItemPolicy],
        help="What to do with item ids that have no item record "
        "(default: abort)",
    )
    p.add_argument(
        "--placeholder-name",
        dest="placeholder_name",
        help="Name emitted for unresolved items with --missing-items=placeholder",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="clogdump",
        description="Collection log extraction from a game cache dump",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, "
        "json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    d = sub.add_parser("dump", help="Write collection_log_info.json")
    _add_cache_args(d)
    d.add_argument(
        "--outputdir",
        type=Path,
        required=True,
        help="Directory receiving the JSON document",
    )
    _add_config_args(d)
    d.add_argument(
        "--emit-manifest",
        dest="emit_manifest",
        type=Path,
        help="Optional path to write a manifest JSON (opt-in)",
    )
    d.set_defaults(func=_dump_cmd)

    v = sub.add_parser(
        "validate", help="Report every unresolved reference in the cache"
    )
    _add_cache_args(v)
    _add_config_args(v)
    v.add_argument(
        "--json", action="store_true", help="Print errors as JSON on stdout"
    )
    v.set_defaults(func=_validate_cmd)

    i = sub.add_parser("inspect", help="Print one decoded cache record")
    _add_cache_args(i)
    i.add_argument("kind", choices=RECORD_KINDS)
    i.add_argument("id", type=int)
    i.set_defaults(func=_inspect_cmd)

    return p


def _select_reporter(requested: str) -> None:
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich" and sys.stderr.isatty():
        set_reporter(RichReporter())
    else:
        # rich without a TTY falls back to plain
        set_reporter(PlainReporter())


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.reporter == "json" and getattr(args, "json", False):
        # both would write JSON to stdout
        parser.error("--json cannot be combined with --reporter json")
    _select_reporter(args.reporter)
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    rep = get_reporter()
    try:
        return args.func(args)
    except ConfigError as e:
        rep.error(str(e), code=e.code, context=e.context or {})
        return EXIT_CONFIG
    except ExtractError as e:
        rep.error(str(e), code=e.code, context=e.context or {})
        return EXIT_FAILED
    finally:
        rep.flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""Grimoire Setup — resolve or validate a lineup from the command line.

    python main.py --script trouble-brewing --players 10 --select baron,imp
    python main.py --script trouble-brewing --players 7 --select ... --validate
    python main.py --serve
"""

import argparse
import json
import logging
import os
import subprocess
import sys
from pathlib import Path

from grimoire import config
from grimoire.lineup import detect_script_issues, resolve_lineup, validate_setup
from grimoire.storage import ScriptRepository, StorageError

ROOT = Path(__file__).parent

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")


def _split_ids(value: str) -> list[str]:
    return [s.strip() for s in value.split(",") if s.strip()]


def build_parser(settings: dict) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve or validate a character lineup")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data directory (default: DATA_DIR or ./presets)")
    parser.add_argument("--script", default=settings["default_script"],
                        help="Script id (default: %(default)s)")
    parser.add_argument("--players", type=int, default=settings["default_players"],
                        help="Player count (default: %(default)s)")
    parser.add_argument("--select", type=_split_ids, default=[],
                        help="Comma-separated character ids to start from")
    parser.add_argument("--validate", action="store_true",
                        help="Validate the selection instead of resolving it")
    parser.add_argument("--lint", action="store_true",
                        help="Print advisory issues for the script and exit")
    parser.add_argument("--serve", action="store_true",
                        help="Start the HTTP API with uvicorn")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log at DEBUG level")
    return parser


def serve(data_dir: Path | None) -> int:
    env = os.environ.copy()
    if data_dir:
        env["DATA_DIR"] = str(data_dir.resolve())
    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    return subprocess.call(
        ["uvicorn", "grimoire.app:app", "--host", HOST, "--port", BACKEND_PORT],
        cwd=ROOT, env=env,
    )


def main(argv: list[str] | None = None) -> int:
    # Settings come from the data dir, so peek at --data-dir first
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--data-dir", type=Path, default=None)
    known, _ = pre.parse_known_args(argv)
    data_dir = known.data_dir or config.data_dir()
    settings = config.get_config(data_dir)

    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings["log_level"],
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.serve:
        return serve(args.data_dir)

    repository = ScriptRepository(data_dir)
    try:
        script, catalog = repository.snapshot(args.script)
    except StorageError as e:
        print(f"Load failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if args.lint:
        out = {"scriptId": script.id, "issues": detect_script_issues(script, catalog)}
        print(json.dumps(out, indent=2))
        return 0

    if args.validate:
        result = validate_setup(script, catalog, args.players, args.select)
        out = {
            "scriptId": script.id,
            "playerCount": args.players,
            "valid": result.is_valid,
            "issues": [i.model_dump(by_alias=True) for i in result.issues],
        }
        print(json.dumps(out, indent=2))
        return 0 if result.is_valid else 2

    result = resolve_lineup(script, catalog, args.players, args.select)
    out = {
        "scriptId": script.id,
        "playerCount": args.players,
        "selection": result.selection,
        "counts": result.counts.model_dump(),
        "appliedModifiers": result.applied_modifiers,
    }
    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

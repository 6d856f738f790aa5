from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from funcbridge.app import App
from funcbridge.config import AppConfig, load_app_config
from funcbridge.config.config import DATABASE_URL_ENV
from funcbridge.db import init_db
from funcbridge.db import repo as dbrepo
from funcbridge.errors import FuncBridgeError
from funcbridge.registry import request_schema, response_schema


def _json_default(o: Any) -> Any:
    if dataclasses.is_dataclass(o) and not isinstance(o, type):
        return dataclasses.asdict(o)
    if isinstance(o, (bytes, bytearray)):
        return bytes(o).decode("utf-8", errors="replace")
    return str(o)


def _dump(obj: Any) -> str:
    return json.dumps(obj, indent=2, default=_json_default)


def make_config(args: argparse.Namespace) -> AppConfig:
    if args.config:
        cfg = load_app_config(Path(args.config))
    else:
        cfg = AppConfig(database_url=os.getenv(DATABASE_URL_ENV))
    tools_root = Path(args.tools_root) if args.tools_root else None
    if tools_root is None and cfg.tools_root is None and Path("tools").is_dir():
        tools_root = Path("tools").resolve()
    return cfg.with_overrides(args.env or (), args.mount or (), tools_root, args.log_level)


def make_app(args: argparse.Namespace) -> App:
    cfg = make_config(args)
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = App(cfg)
    app.discover()
    return app


def cmd_list(app: App, args: argparse.Namespace) -> int:
    functions = app.registry.list()
    if not functions:
        print("No functions registered.")
        return 0
    for name, d in functions.items():
        params = ", ".join(f"{a.name}: {a.semantic_type.label}" for a in d.args)
        rets = ", ".join(r.semantic_type.label for r in d.returns)
        print(f"- {name}({params}) -> ({rets})  {d.description}".rstrip())
    return 0


def cmd_schema(app: App, args: argparse.Namespace) -> int:
    d = app.registry.get(args.function)
    print(_dump({"request": request_schema(d), "response": response_schema(d)}))
    return 0


def cmd_call(app: App, args: argparse.Namespace) -> int:
    try:
        payload = json.loads(args.json) if args.json else {}
    except json.JSONDecodeError as e:
        print(_dump({"error": f"invalid JSON arguments: {e}"}))
        return 2

    res = app.call(args.function, payload, channel="cli", validate_output=args.validate_output)
    print(_dump(res.envelope()))
    if args.verbose:
        print("status:", res.status, file=sys.stderr)
        if res.error:
            print("error:", res.error, file=sys.stderr)
        print("meta:", res.meta, file=sys.stderr)
    return 0 if res.ok else 1


def cmd_runs(app: App, args: argparse.Namespace) -> int:
    audit = app.gateway.audit
    if audit is None:
        print(f"No audit database configured (set database_url or {DATABASE_URL_ENV}).")
        return 1
    with audit.session() as db:
        runs = dbrepo.list_call_runs(db, function_name=args.function, limit=args.limit)

    if not runs:
        print("No calls recorded.")
        return 0

    for r in runs:
        print(
            f"- request_id={r.request_id} function={r.function_name} status={r.status} "
            f"channel={r.channel} latency_ms={r.latency_ms} ts={r.ts}"
        )
    return 0


def cmd_init_db(app: App, args: argparse.Namespace) -> int:
    url = init_db(app.config.database_url)
    print("DB initialized (tables created):", url)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="funcbridge", description="Call registered functions through the sandboxed gateway.")
    p.add_argument("--config", help="YAML config file")
    p.add_argument("--env", action="append", metavar="KEY=VALUE", help="Environment variable for the sandbox (repeatable)")
    p.add_argument("--mount", action="append", metavar="HOST:VIRTUAL", help="Mount a host directory (repeatable)")
    p.add_argument("--tools-root", help="Directory holding */manifest.json function packages")
    p.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    ls = sub.add_parser("list", help="List registered functions.")
    ls.set_defaults(func=cmd_list)

    sc = sub.add_parser("schema", help="Print request/response JSON schema for a function.")
    sc.add_argument("function")
    sc.set_defaults(func=cmd_schema)

    cp = sub.add_parser("call", help="Call a function with a JSON object of arguments.")
    cp.add_argument("function", help="Function name, e.g. calculator.add")
    cp.add_argument("json", nargs="?", help='JSON arguments, e.g. \'{"x": "10", "y": "20"}\'')
    cp.add_argument("--validate-output", action="store_true", help="Check the result against the response schema")
    cp.add_argument("-v", "--verbose", action="store_true")
    cp.set_defaults(func=cmd_call)

    rp = sub.add_parser("runs", help="List recorded calls from the audit database.")
    rp.add_argument("--function")
    rp.add_argument("--limit", type=int, default=20)
    rp.set_defaults(func=cmd_runs)

    ip = sub.add_parser("init-db", help="Create the audit database tables.")
    ip.set_defaults(func=cmd_init_db)

    return p


def main(argv: Optional[Sequence[str]] = None, app: Optional[App] = None) -> int:
    """Entry point. With `app` given, global options are ignored and that app is used."""
    args = build_parser().parse_args(argv)
    try:
        if app is None:
            app = make_app(args)
        return args.func(app, args)
    except FuncBridgeError as e:
        print(_dump({"error": e.message, "code": e.code}), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

"""Command line entrypoint for sqlprobe."""

import argparse
import getpass
import json
import logging
import sys
from typing import List, Optional

from sqlprobe import probe
from sqlprobe.config import get_env_password
from sqlprobe.db import Credential
from sqlprobe.logging import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlprobe",
        description="Test connectivity to a SQL Server instance and report session, server and encryption details.",
    )
    parser.add_argument("host", help="server name or address, optionally host\\instance")
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--database", "-d", default=None, help="catalog to connect to (default: master)")
    parser.add_argument("--username", "-u", default=None, help="SQL login; omit for integrated authentication")
    parser.add_argument(
        "--password", "-p", default=None,
        help="password for --username (falls back to SQLPROBE_PASSWORD, then a prompt)",
    )
    parser.add_argument("--encrypt", action="store_true", help="request an encrypted connection")
    parser.add_argument("--quiet", "-q", action="store_true", help="only print True/False")
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", "-v", action="store_true", help="log the redacted connection string")
    return parser


def _resolve_credential(args: argparse.Namespace) -> Optional[Credential]:
    if not args.username:
        return None
    password = args.password
    if password is None:
        password = get_env_password()
    if password is None:
        password = getpass.getpass(f"Password for {args.username}: ")
    return Credential(args.username, password)


def _print_result(result: probe.ConnectionProbeResult) -> None:
    data = result.to_dict()
    data["uptime"] = str(result.uptime)
    del data["uptime_seconds"]
    width = max(len(k) for k in data)
    for k, v in data.items():
        print(f"{k.ljust(width)} : {v}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_file, level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        credential = _resolve_credential(args)
    except (EOFError, OSError) as e:
        # no terminal to prompt on
        if args.quiet:
            print(False)
        else:
            print(f"ERROR: could not read password for {args.username}: {e!r}", file=sys.stderr)
        return 1

    if args.quiet:
        ok = probe.test_connection(
            args.host, credential, args.database, encrypt=args.encrypt, quiet=True, port=args.port,
        )
        print(ok)
        return 0 if ok else 1

    try:
        result = probe.test_connection(
            args.host, credential, args.database, encrypt=args.encrypt, port=args.port,
        )
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

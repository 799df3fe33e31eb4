from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List

from wxcorp.access_token import DefaultAccessTokenServer
from wxcorp.cli.client_cmds import _print_json, make_client, register_media_commands
from wxcorp.errors import CorpClientError


def cmd_token(args: argparse.Namespace) -> int:
    """Fetch (or refresh) an access token and report its lifetime.

    Security notes:
    - The token itself is never printed.

    """

    try:
        c, _ = make_client(args)
        if args.refresh:
            c.refresh_token()
        else:
            c.token()
    except CorpClientError as e:
        _print_json(e.to_dict(), file=sys.stderr)
        return 1

    out = {"corp_id": getattr(c.token_server, "corp_id", None), "ok": True}
    if isinstance(c.token_server, DefaultAccessTokenServer):
        out["valid_for_sec"] = max(0, int(c.token_server.expires_at - time.monotonic()))
    _print_json(out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="wxcorp", description="WeChat Work corp API client")
    p.add_argument("--corp-id", default=None, help="Corp id (WXCORP_CORP_ID)")
    p.add_argument("--corp-secret", default=None, help="Corp secret (WXCORP_CORP_SECRET)")
    p.add_argument("--base-url", default=None, help="API base URL (WXCORP_BASE_URL)")
    p.add_argument(
        "--max-upload-bytes", type=int, default=None, help="Client-side upload cap"
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log requests to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    tk = sub.add_parser("token", help="Fetch an access token")
    tk.add_argument("--refresh", action="store_true", help="Force a new token")
    tk.set_defaults(func=cmd_token)

    register_media_commands(sub)
    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())

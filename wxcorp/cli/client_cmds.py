from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import Tuple

from pydantic import BaseModel

from wxcorp.client.corp import CorpClient
from wxcorp.config import ClientConfig, build_client
from wxcorp.errors import CorpClientError
from wxcorp.media import (
    MEDIA_TYPES,
    upload_image_from_file,
    upload_material_from_file,
    upload_media_from_file,
)
from wxcorp.models import CorpError, VideoDescription


def _print_json(obj: object, *, file=None) -> None:
    """Print JSON to stdout (or `file`)."""
    if isinstance(obj, BaseModel):
        obj = obj.model_dump()
    print(json.dumps(obj, indent=2, sort_keys=True, default=str), file=file or sys.stdout)


def client_config_from_args(args: argparse.Namespace) -> ClientConfig:
    """Environment config, overridden by any flags given on the command line."""

    cfg = ClientConfig.from_env()
    overrides = {
        "corp_id": args.corp_id,
        "corp_secret": args.corp_secret,
        "base_url": args.base_url,
        "max_upload_bytes": args.max_upload_bytes,
    }
    return dataclasses.replace(cfg, **{k: v for k, v in overrides.items() if v is not None})


def make_client(args: argparse.Namespace) -> Tuple[CorpClient, ClientConfig]:
    cfg = client_config_from_args(args)
    if not cfg.corp_id or not cfg.corp_secret:
        raise CorpClientError("corp id and secret are required (--corp-id/--corp-secret or WXCORP_*)")
    return build_client(cfg), cfg


def _report(result: CorpError) -> int:
    """Print an upload result; non-zero errcodes go to stderr."""
    if not result.ok:
        _print_json(result, file=sys.stderr)
        return 2
    _print_json(result)
    return 0


def cmd_media_upload(args: argparse.Namespace) -> int:
    """Upload a temporary media file."""
    try:
        c, cfg = make_client(args)
        r = upload_media_from_file(c, args.type, args.file, base_url=cfg.base_url)
    except CorpClientError as e:
        _print_json(e.to_dict(), file=sys.stderr)
        return 1
    return _report(r)


def cmd_media_uploadimg(args: argparse.Namespace) -> int:
    """Upload an image for use in message bodies."""
    try:
        c, cfg = make_client(args)
        r = upload_image_from_file(c, args.file, base_url=cfg.base_url)
    except CorpClientError as e:
        _print_json(e.to_dict(), file=sys.stderr)
        return 1
    return _report(r)


def cmd_material_add(args: argparse.Namespace) -> int:
    """Upload a permanent material."""
    if args.introduction and not args.title:
        print("error: --introduction requires --title", file=sys.stderr)
        return 1
    if args.title and args.type != "video":
        print("error: --title/--introduction are only accepted for --type video", file=sys.stderr)
        return 1

    description = None
    if args.title:
        description = VideoDescription(title=args.title, introduction=args.introduction or "")
    try:
        c, cfg = make_client(args)
        r = upload_material_from_file(
            c,
            args.agent_id,
            args.type,
            args.file,
            description=description,
            base_url=cfg.base_url,
        )
    except CorpClientError as e:
        _print_json(e.to_dict(), file=sys.stderr)
        return 1
    return _report(r)


def register_media_commands(sub: argparse._SubParsersAction) -> None:
    """Register the `media` and `material` commands."""

    media = sub.add_parser("media", help="Temporary media uploads")
    msub = media.add_subparsers(dest="media_cmd", required=True)

    up = msub.add_parser("upload", help="Upload a temporary media file")
    up.add_argument("file", help="Path to local file")
    up.add_argument("--type", required=True, choices=sorted(MEDIA_TYPES), help="Media type")
    up.set_defaults(func=cmd_media_upload)

    img = msub.add_parser("uploadimg", help="Upload an image for message bodies")
    img.add_argument("file", help="Path to local image")
    img.set_defaults(func=cmd_media_uploadimg)

    material = sub.add_parser("material", help="Permanent material uploads")
    matsub = material.add_subparsers(dest="material_cmd", required=True)

    add = matsub.add_parser("add", help="Upload a permanent material")
    add.add_argument("file", help="Path to local file")
    add.add_argument("--type", required=True, choices=sorted(MEDIA_TYPES), help="Media type")
    add.add_argument("--agent-id", type=int, required=True, help="Application agent id")
    add.add_argument("--title", default=None, help="Video title (video only)")
    add.add_argument("--introduction", default=None, help="Video introduction (video only)")
    add.set_defaults(func=cmd_material_add)

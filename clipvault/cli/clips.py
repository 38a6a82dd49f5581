# =============================================================================
# clipvault/cli/clips.py: Clip Management CLI
# =============================================================================
#
# Works directly against the configured SQLite database and upload
# directory, without going through the HTTP server:
#
#   python -m clipvault.cli ingest notes.txt      # analyse + store a file
#   python -m clipvault.cli search --query cat --type image
#   python -m clipvault.cli search --json         # machine-readable output
#   python -m clipvault.cli remove <clip-id>
#
# Exit codes: 0 on success, 1 on any ClipVault error (message on stderr).
# =============================================================================

"""Command-line interface for ingesting, searching and removing clips."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

from clipvault.config.settings import Settings
from clipvault.main import _build_all
from clipvault.models.clip import Clip, FileType
from clipvault.services.clip_service import ClipService
from clipvault.utils.errors import ClipVaultError
from clipvault.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_clip(clip: Clip) -> str:
    created = clip.created_at.isoformat(timespec="seconds") if clip.created_at else "-"
    lines = [
        f"{clip.id}  [{clip.file_type.value}]  {clip.filename}  ({clip.file_size} bytes)",
        f"    created:  {created}",
        f"    summary:  {clip.ai_summary}",
    ]
    if clip.ai_tags:
        lines.append(f"    tags:     {', '.join(clip.ai_tags)}")
    if clip.ai_category:
        lines.append(f"    category: {clip.ai_category}")
    if clip.thumbnail_url:
        lines.append(f"    url:      {clip.thumbnail_url}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _build_service(app_settings: Settings) -> ClipService:
    components = _build_all(app_settings)
    await components["blob_store"].initialize()
    await components["clip_repository"].initialize()
    return components["clip_service"]


async def _handle_ingest(args: argparse.Namespace, service: ClipService) -> int:
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    content_type = args.content_type or mimetypes.guess_type(path.name)[0]
    data = await asyncio.to_thread(path.read_bytes)
    clip = await service.analyze_and_ingest(path.name, content_type, data)
    print(_format_clip(clip))
    return 0


async def _handle_search(args: argparse.Namespace, service: ClipService) -> int:
    clips = await service.search(query=args.query, file_type=args.type)
    if args.json:
        print(json.dumps([clip.model_dump(mode="json") for clip in clips], indent=2))
        return 0
    if not clips:
        print("No clips found.")
        return 0
    for clip in clips:
        print(_format_clip(clip))
    print(f"\n{len(clips)} clip(s)")
    return 0


async def _handle_remove(args: argparse.Namespace, service: ClipService) -> int:
    await service.remove(args.clip_id)
    print(f"Removed {args.clip_id}")
    return 0


_HANDLERS = {
    "ingest": _handle_ingest,
    "search": _handle_search,
    "remove": _handle_remove,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    try:
        service = await _build_service(app_settings)
        return await _HANDLERS[args.command](args, service)
    except ClipVaultError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clipvault",
        description="Manage ClipVault clips from the command line.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Clip commands")

    ingest_parser = subparsers.add_parser("ingest", help="Analyse and store a file")
    ingest_parser.add_argument("file", help="Path to the file to ingest")
    ingest_parser.add_argument(
        "--content-type",
        default=None,
        help="MIME type override (guessed from the extension by default)",
    )

    search_parser = subparsers.add_parser("search", help="List clips, newest first")
    search_parser.add_argument("--query", default=None, help="Case-insensitive substring")
    search_parser.add_argument(
        "--type",
        default=None,
        choices=[file_type.value for file_type in FileType],
        help="Only clips of this file type",
    )
    search_parser.add_argument("--json", action="store_true", help="Print JSON")

    remove_parser = subparsers.add_parser("remove", help="Delete a clip and its blob")
    remove_parser.add_argument("clip_id", help="Id of the clip to remove")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Exits with the handler's status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(log_level="WARNING", stream=sys.stderr)
    sys.exit(asyncio.run(_run(args, app_settings)))


if __name__ == "__main__":
    main()

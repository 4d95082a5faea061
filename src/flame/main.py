#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence, TextIO

from flame.commands import (
    collections_command,
    copy_command,
    delete_command,
    down_command,
    move_command,
    status_command,
    up_command,
)
from flame.context import FirestoreClientHolder
from flame.download import DownloadResult
from flame.results import OperationResult, ResultKind
from flame.settings import TARGETS, SettingsError, load_settings, switch_target


LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="flame", description="Read and write Firestore documents from the shell.")
    parser.add_argument("--target", choices=TARGETS, default=None, help="Override the configured target for this run.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show the active configuration.")
    subparsers.add_parser("collections", help="List root collections.")

    down = subparsers.add_parser("down", help="Download a document or collection.")
    down.add_argument("path", help="Document or collection path (e.g. 'users' or 'users/abc123').")
    down.add_argument("-l", "--limit", type=int, default=None, help="Maximum number of documents (collections only).")
    down.add_argument("--doc-id", action="store_true", help="Include the document id as _id.")

    up = subparsers.add_parser("up", help="Upload a JSON object or array of objects.")
    up.add_argument("path", help="Document or collection path.")
    up.add_argument("-d", "--data", default=None, help="JSON data. Read from stdin when omitted.")
    up.add_argument("--merge", action="store_true", help="Merge into existing documents instead of overwriting.")
    up.add_argument("--id-field", default=None, help="Field holding the document id.")

    for name in ("delete", "rm"):
        delete = subparsers.add_parser(name, help="Delete a document or every document of a collection.")
        delete.add_argument("path", help="Document or collection path.")
        delete.add_argument("-f", "--force", action="store_true", help="Skip the confirmation prompt.")

    for name in ("copy", "cp"):
        copy = subparsers.add_parser(name, help="Copy a document.")
        copy.add_argument("source", help="Source document path.")
        copy.add_argument("destination", help="Destination document path.")
        copy.add_argument("--id-field", default=None, help="Write the destination id into this field.")

    for name in ("move", "mv"):
        move = subparsers.add_parser(name, help="Move a document atomically.")
        move.add_argument("source", help="Source document path.")
        move.add_argument("destination", help="Destination document path.")
        move.add_argument("--id-field", default=None, help="Write the destination id into this field.")

    return parser.parse_args(argv)


def ask(message: str) -> bool:
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def run_command(args: argparse.Namespace, holder: FirestoreClientHolder, *, stdin: TextIO) -> OperationResult:
    command = args.command
    if command == "status":
        return status_command(holder.config)
    if command == "collections":
        return collections_command(holder)
    if command == "down":
        return down_command(holder, args.path, limit=args.limit, include_id=args.doc_id)
    if command == "up":
        raw = args.data if args.data is not None else stdin.read()
        return up_command(holder, args.path, raw, merge=args.merge, id_field=args.id_field)
    if command in {"delete", "rm"}:
        return delete_command(holder, args.path, force=args.force, confirm=ask)
    if command in {"copy", "cp"}:
        return copy_command(holder, args.source, args.destination, id_field=args.id_field)
    if command in {"move", "mv"}:
        return move_command(holder, args.source, args.destination, id_field=args.id_field)
    raise ValueError(f"unsupported command: {command}")


def report(result: OperationResult, *, stdout: TextIO) -> int:
    payload = result.payload
    if isinstance(payload, DownloadResult) and payload.found:
        stdout.write(payload.rendered + "\n")
    elif isinstance(payload, DownloadResult) and not payload.is_document:
        stdout.write("[]\n")
    elif result.kind is ResultKind.SUCCESS and isinstance(payload, list):
        for collection_id in payload:
            stdout.write(f"{collection_id}\n")

    if result.kind.is_error:
        LOGGER.error(result.message)
        return 1
    if result.kind in {ResultKind.WARNING, ResultKind.PARTIAL}:
        LOGGER.warning(result.message)
    else:
        for line in result.message.splitlines():
            LOGGER.info(line)
    return 0


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_settings()
        if args.target is not None:
            config = switch_target(config, args.target)
    except SettingsError as exc:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        LOGGER.error("Could not load flame config: %s", exc)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=f"[{config.target}] %(message)s",
    )
    holder = FirestoreClientHolder(config)
    result = run_command(args, holder, stdin=stdin or sys.stdin)
    return report(result, stdout=stdout or sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())

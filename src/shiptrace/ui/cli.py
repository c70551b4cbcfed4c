# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shiptrace.app import (
    allocate_consignment_number,
    consignment_movement_history,
    consignment_number_summary,
    load_source_documents,
    track_consignment,
)
from shiptrace.config import ConfigurationError, configure_logging
from shiptrace.domain.errors import ShipmentNotFoundError
from shiptrace.domain.model import SourceKind

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FATAL = 1
EXIT_INVALID = 2
EXIT_NOT_FOUND = 4


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track shipments and issue consignment numbers")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    track = subparsers.add_parser("track", help="Show the full tracking view of a consignment")
    track.add_argument("consignment_number", type=str, help="Digits-only consignment number")

    history = subparsers.add_parser("history", help="Show only the movement history")
    history.add_argument("consignment_number", type=str, help="Digits-only consignment number")

    subparsers.add_parser("allocate", help="Issue the next consignment number")
    subparsers.add_parser("summary", help="Report the highest reserved consignment number")

    load = subparsers.add_parser("load", help="Store source documents from a JSON Lines file")
    load.add_argument("path", type=Path, help="File with one JSON document per line")
    load.add_argument(
        "--kind",
        choices=[kind.value for kind in SourceKind],
        help="Source kind for documents that carry no 'kind' field",
    )

    return parser.parse_args(list(argv))


def _read_documents(path: Path, default_kind: str | None) -> Iterator[dict[str, object]]:
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                document = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{line_number}: invalid JSON ({exc.msg})") from exc
            if not isinstance(document, dict):
                raise ValueError(f"{path}:{line_number}: expected a JSON object")
            if default_kind is not None:
                document.setdefault("kind", default_kind)
            yield document


def _emit(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _run(args: argparse.Namespace) -> None:
    if args.command == "track":
        _emit(track_consignment(args.consignment_number).to_payload())
    elif args.command == "history":
        _emit(consignment_movement_history(args.consignment_number).to_payload())
    elif args.command == "allocate":
        _emit({"consignmentNumber": allocate_consignment_number()})
    elif args.command == "summary":
        _emit(consignment_number_summary().to_payload())
    elif args.command == "load":
        counts = load_source_documents(_read_documents(args.path, args.kind))
        _emit({str(kind): count for kind, count in counts.items()})
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        _run(parsed_args)
    except ShipmentNotFoundError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_NOT_FOUND)
    except (ValueError, ConfigurationError, OSError):
        log.exception("CLI validation error")
        sys.exit(EXIT_INVALID)
    except Exception:
        log.exception("Fatal error")
        sys.exit(EXIT_FATAL)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

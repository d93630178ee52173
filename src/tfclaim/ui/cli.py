from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from pathlib import Path
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from tfclaim.app import (
    apply_manifest,
    delete_claim,
    get_claim_document,
    reconcile_claim,
    run_controller,
    set_claim_action,
)
from tfclaim.config import ConfigurationError, configure_logging, get_log_level
from tfclaim.domain.model import NamespacedName

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

STOP = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile Terraform apply claims")
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Create a claim from a JSON manifest")
    apply.add_argument("-f", "--filename", type=Path, required=True, help="Manifest file")

    get = subparsers.add_parser("get", help="Print the stored claim document")
    get.add_argument("key", type=str, help="Claim key as NAMESPACE/NAME")

    set_action = subparsers.add_parser("set-action", help="Write status.action of a claim")
    set_action.add_argument("key", type=str, help="Claim key as NAMESPACE/NAME")
    set_action.add_argument(
        "action",
        type=str,
        help="One of Approve, Reject, Plan, Apply or an empty string to clear",
    )

    delete = subparsers.add_parser("delete", help="Delete a claim")
    delete.add_argument("key", type=str, help="Claim key as NAMESPACE/NAME")

    reconcile = subparsers.add_parser("reconcile", help="Run a single reconcile pass")
    reconcile.add_argument("key", type=str, help="Claim key as NAMESPACE/NAME")

    subparsers.add_parser("run", help="Run the controller until interrupted")

    return parser.parse_args(list(argv))


def _parse_key(args: argparse.Namespace) -> NamespacedName | None:
    value = getattr(args, "key", None)
    if value is None:
        return None
    return NamespacedName.parse(value)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    key: NamespacedName | None
    try:
        configure_logging(level=get_log_level())
        parsed_args = _parse_args(args_list)
        key = _parse_key(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "apply":
            apply_manifest(parsed_args.filename)
        elif parsed_args.command == "get" and key is not None:
            print(json.dumps(get_claim_document(key), indent=2, sort_keys=True))  # noqa: T201
        elif parsed_args.command == "set-action" and key is not None:
            set_claim_action(key, parsed_args.action)
        elif parsed_args.command == "delete" and key is not None:
            delete_claim(key)
            log.info("Deleted claim %s", key)
        elif parsed_args.command == "reconcile" and key is not None:
            outcome = reconcile_claim(key)
            if outcome.error is not None:
                sys.exit(1)
        elif parsed_args.command == "run":
            run_controller(STOP)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except (ValueError, ConfigurationError):
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def stop_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Stop the controller gracefully on SIGINT/SIGTERM."""
    log.info("Closed by user")
    if STOP.is_set():
        sys.exit(0)
    STOP.set()


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, stop_handler)
    signal(SIGTERM, stop_handler)
    main()


if __name__ == "__main__":
    entrypoint()

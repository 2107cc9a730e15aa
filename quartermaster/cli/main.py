#!/usr/bin/env python3

import argparse
import logging
from collections.abc import Sequence

from quartermaster.runtime import get_logger, set_log_level

logger = get_logger(__name__)


def _print_error(error: str) -> None:
    for line in error.splitlines():
        print(line)


def _parse_quantity(raw: str) -> tuple[str, str | None, int]:
    """Parse ``GROUP[@LOCATION]=N``."""
    target, sep, count = raw.rpartition("=")
    if not sep or not target.strip():
        raise argparse.ArgumentTypeError(f"Expected GROUP[@LOCATION]=N, got {raw!r}")
    try:
        quantity = int(count)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Quantity must be an integer in {raw!r}") from None
    group, at, location = target.partition("@")
    return group.strip(), (location.strip() or None) if at else None, quantity


def _cmd_candidates(args: argparse.Namespace) -> int:
    from quartermaster.application.receipts.listing import CandidateListingRequest, run_list_candidates
    from quartermaster.inventory_access import open_inventory_providers
    from quartermaster.runtime import load_settings

    settings = load_settings()
    providers = open_inventory_providers(settings, api_url=args.api_url)
    try:
        listing = run_list_candidates(
            CandidateListingRequest(query=args.query, recipient_id=args.recipient, receipt_id=args.receipt),
            catalog=providers.catalog,
            receipts=providers.receipts,
            recipients=providers.recipients,
            serialized_suffix=settings.serialized_suffix,
        )
    finally:
        providers.close()

    if listing.status != "ok":
        assert listing.error is not None
        _print_error(listing.error)
        return 1

    if not listing.candidates:
        print("No selectable items.")
        return 0

    print(f"\nSelectable items ({len(listing.candidates)}):")
    print("-" * 80)
    for i, candidate in enumerate(listing.candidates, 1):
        serial = candidate.instance.serial or ""
        marker = "*" if candidate.home_match else " "
        print(
            f"{i:>3}.{marker} {candidate.display_name:<40} {serial:<14} "
            f"{candidate.remaining_capacity:>3} left  {candidate.id}"
        )
    print("-" * 80)
    return 0


def _cmd_compose(args: argparse.Namespace) -> int:
    from quartermaster.application.receipts.issue import IssueReceiptRequest, QuantityRequest, run_issue_receipt
    from quartermaster.inventory_access import open_inventory_providers

    request = IssueReceiptRequest(
        recipient_id=args.recipient,
        item_ids=tuple(args.item or ()),
        quantities=tuple(
            QuantityRequest(group_name=group, quantity=quantity, location=location)
            for group, location, quantity in (args.quantity or ())
        ),
        receipt_id=args.receipt,
        created_by_id=args.created_by,
    )

    providers = open_inventory_providers(api_url=args.api_url)
    try:
        result = run_issue_receipt(
            request,
            catalog=providers.catalog,
            receipts=providers.receipts,
            recipients=providers.recipients,
        )
    finally:
        providers.close()

    for message in result.messages:
        print(message)

    if result.status in {"created", "updated"}:
        assert result.receipt is not None and result.submission is not None
        print(f"Receipt {result.receipt.id} {result.status} with {len(result.submission.instance_ids)} item(s).")
        return 0

    logger.debug("Compose ended with status %s", result.status)
    _print_error(f"Error ({result.status}): {result.error or 'unknown error'}")
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Inventory receipt composition CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  candidates [--query Q] [--recipient ID] [--receipt ID]
                             List items that can be put on a receipt
  compose --recipient ID [--item ID ...] [--quantity GROUP[@LOCATION]=N ...]
                             Compose and submit a receipt (--receipt ID to update)

Notes:
  Serialized items are added by id with --item.
  Fungible items are requested by count with --quantity.
""",
    )
    parser.add_argument("--api-url", default=None, help="Inventory API base URL (default: from settings)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    candidates_parser = subparsers.add_parser("candidates", help="List selectable items")
    candidates_parser.add_argument("--query", default=None, help="Filter by name, serial, or location")
    candidates_parser.add_argument("--recipient", default=None, help="Recipient id (ranks their location first)")
    candidates_parser.add_argument("--receipt", default=None, help="Receipt id being edited")

    compose_parser = subparsers.add_parser("compose", help="Compose and submit a receipt")
    compose_parser.add_argument("--recipient", default=None, help="Recipient id")
    compose_parser.add_argument("--receipt", default=None, help="Existing receipt id to update")
    compose_parser.add_argument("--created-by", default=None, help="Id of the issuing user")
    compose_parser.add_argument("--item", action="append", help="Item id to add (repeatable)")
    compose_parser.add_argument(
        "--quantity",
        action="append",
        type=_parse_quantity,
        help="GROUP[@LOCATION]=N for fungible items (repeatable)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command == "candidates":
        return _cmd_candidates(args)
    if args.command == "compose":
        return _cmd_compose(args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())

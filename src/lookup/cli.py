"""CLI for metadata lookups.

Usage:
    mediaset-lookup lookup Movies upc 883929106813
    mediaset-lookup lookup books isbn 9780441172719
    mediaset-lookup capabilities
"""

import argparse
import sys

from rich.console import Console

from common.logger import error, get_logger, setup_logging

from .factory import build_lookup_service
from .types import ConfigurationError, LookupCancelledError, LookupRejectedError, ProviderError

logger = get_logger(__name__)

output = Console(soft_wrap=True)


def cmd_lookup(args) -> int:
    """Look up one identifier and print the canonical response as JSON."""
    with build_lookup_service() as service:
        try:
            result = service.dispatcher.lookup(args.entity_type, args.identifier_type, args.value)
        except LookupRejectedError as e:
            error(e.message)
            return 2
        except ConfigurationError as e:
            error(str(e))
            return 2
        except ProviderError as e:
            error(f"Lookup failed: {e}")
            return 1
        except (KeyboardInterrupt, LookupCancelledError):
            error("Lookup cancelled")
            return 130

    if result is None:
        logger.warning(
            f"No {args.entity_type} found for {args.identifier_type} {args.value}"
        )
        return 3

    output.print_json(data=result.to_dict())
    return 0


def cmd_capabilities(args) -> int:
    """Print the identifier types each configured entity type accepts."""
    with build_lookup_service() as service:
        output.print_json(data=service.dispatcher.capabilities())
    return 0


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="mediaset-lookup",
        description="Look up book, movie, game and music metadata by identifier",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level when LOG_LEVEL is not set (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Look up metadata for an identifier",
        description="Resolve an identifier (isbn, lccn, oclc, olid, upc, ean) to metadata",
    )
    lookup_parser.add_argument("entity_type", help="Books, Movies, Games or Musics")
    lookup_parser.add_argument("identifier_type", help="isbn, lccn, oclc, olid, upc or ean")
    lookup_parser.add_argument("value", help="Identifier value")

    subparsers.add_parser(
        "capabilities",
        help="List supported identifier types per entity type",
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(level=args.log_level)

    if args.command == "lookup":
        sys.exit(cmd_lookup(args))
    elif args.command == "capabilities":
        sys.exit(cmd_capabilities(args))


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import json
import sys
import uuid
from typing import Optional

from foryou_runtime.adapters.catalog.json_file_catalog import JsonFileCatalogSource
from foryou_runtime.app.factory import create_feed_service
from foryou_runtime.application.errors import CatalogRecordError
from foryou_runtime.application.feed_context import FeedContext
from foryou_runtime.domain.primitives.interest_profile import InterestEvent
from foryou_runtime.domain.primitives.interest_profile import rules as profile_rules
from foryou_runtime.observability.logging import configure_logging
from foryou_runtime.settings import get_settings


def parse_events(values: Optional[list[str]]) -> list[InterestEvent]:
    """``TYPE:HANDLE`` pairs, e.g. ``product_open:blue-denim-jeans``."""
    events = []
    for value in values or []:
        event_type, _, handle = value.partition(":")
        events.append(InterestEvent.new(type=event_type.strip(), handle=handle.strip() or None))
    return events


def main() -> None:
    configure_logging()
    settings = get_settings()
    parser = argparse.ArgumentParser(description="For You Runtime CLI")
    subparsers = parser.add_subparsers(dest="command")

    preview_parser = subparsers.add_parser("preview", help="Rank a catalog file and print one feed page")
    preview_parser.add_argument("--catalog", required=True, dest="catalog_path")
    preview_parser.add_argument(
        "--seed", default="", dest="seed_handle", help="Product handle the feed follows; omit for a profile-only feed"
    )
    preview_parser.add_argument("--page", type=int, default=0, dest="page_depth")
    preview_parser.add_argument("--page-size", type=int, default=settings.default_page_size)
    preview_parser.add_argument("--refresh-key", default=None)
    preview_parser.add_argument("--session-id", default=None)
    preview_parser.add_argument("--gender", choices=profile_rules.GENDERS, default=None)
    preview_parser.add_argument(
        "--event",
        action="append",
        dest="events",
        help="Interest event applied before ranking, as TYPE:HANDLE (repeatable)",
    )
    preview_parser.add_argument("--debug", action="store_true", dest="include_debug")

    args = parser.parse_args()
    if args.command != "preview":
        parser.print_help()
        return

    try:
        catalog = JsonFileCatalogSource(args.catalog_path)
    except (OSError, CatalogRecordError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    service = create_feed_service(catalog, settings=settings)
    if args.gender:
        service.set_gender(args.gender)
    for event in parse_events(args.events):
        service.track_event(event)

    ctx = FeedContext.from_args(
        seed_handle=args.seed_handle,
        session_id=args.session_id or uuid.uuid4().hex,
        page_size=args.page_size,
        page_depth=args.page_depth,
        refresh_key=args.refresh_key,
        include_debug=args.include_debug,
    )
    page = service.build_page(ctx)
    service.flush()
    print(json.dumps(page.as_dict(), indent=2, default=str))


if __name__ == "__main__":
    main()

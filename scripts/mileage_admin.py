#!/usr/bin/env python3
"""
Administrator command line for the mileage settlement system.

Every command runs inside one ``session_scope()`` as an admin actor: it
commits when the command succeeds and rolls back when it fails.  Typed
errors are printed with their code and the process exits with status 1.

Usage:
  python3 scripts/mileage_admin.py init-db
  python3 scripts/mileage_admin.py add-driver --name Kim --pin 1234 \\
      --vehicle-type gasoline --fuel-efficiency 12.5
  python3 scripts/mileage_admin.py set-rates 2025 3 --gasoline 1650 \\
      --diesel 1500 --lpg 1000 --electric 300 --depreciation 140
  python3 scripts/mileage_admin.py bulk-settle 2025 3
  python3 scripts/mileage_admin.py estimate-route 37.5665,126.9780 37.4563,126.7052

Options common to every command:
  --config PATH     YAML configuration (default: mileage_config/sets/default.yaml)
  --db-url URL      Overrides database.url from the configuration
  --admin-id UUID   Acting administrator (default: $MILEAGE_ADMIN_ID or a fixed CLI id)
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from uuid import NAMESPACE_URL, UUID, uuid5

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from mileage_batch import BulkSettlementOrchestrator  # noqa: E402
from mileage_config import ConfigValidationError, get_active_config  # noqa: E402
from mileage_kernel.db.engine import (  # noqa: E402
    check_connection,
    create_tables,
    init_engine_from_url,
    session_scope,
)
from mileage_kernel.domain.clock import SystemClock  # noqa: E402
from mileage_kernel.domain.context import ActorContext  # noqa: E402
from mileage_kernel.domain.distance import Coordinate, estimate_route_distance  # noqa: E402
from mileage_kernel.domain.dtos import SubmissionState  # noqa: E402
from mileage_kernel.exceptions import MileageError, ValidationError  # noqa: E402
from mileage_kernel.logging_config import configure_logging  # noqa: E402
from mileage_kernel.selectors import DriverSelector, SubmissionSelector  # noqa: E402
from mileage_kernel.services import (  # noqa: E402
    DriverService,
    RateService,
    SubmissionService,
)

CLI_ADMIN_ID = uuid5(NAMESPACE_URL, "mileage_admin")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Mileage settlement administration")
    p.add_argument("--config", default=None, help="Path to a YAML configuration file")
    p.add_argument("--db-url", default=None, help="Database URL (overrides the configuration)")
    p.add_argument(
        "--admin-id",
        default=os.environ.get("MILEAGE_ADMIN_ID"),
        help="Acting administrator id",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the tables")
    sub.add_parser("ping", help="Run the keep-alive query")

    route = sub.add_parser(
        "estimate-route", help="Estimate the road distance along geocoded points"
    )
    route.add_argument("points", nargs="+", metavar="LAT,LON")
    route.add_argument("--round-trip", action="store_true")

    add = sub.add_parser("add-driver", help="Register a driver")
    add.add_argument("--name", required=True)
    add.add_argument("--pin", required=True)
    add.add_argument("--vehicle-type", required=True)
    add.add_argument("--fuel-efficiency", required=True)

    sub.add_parser("list-drivers", help="List every driver")

    rates = sub.add_parser("set-rates", help="Save the rate table for a month")
    _add_period(rates)
    for fuel in ("gasoline", "diesel", "lpg", "electric"):
        rates.add_argument(f"--{fuel}", required=True, help=f"{fuel} price")
    rates.add_argument("--depreciation", required=True, help="Depreciation per km")

    show = sub.add_parser("show-rates", help="Show the rate table for a month")
    _add_period(show)

    listing = sub.add_parser("list-submissions", help="List a month's submissions")
    _add_period(listing)
    listing.add_argument(
        "--status",
        choices=[SubmissionState.PENDING.value, SubmissionState.COMPLETED.value],
        default=None,
    )

    settle = sub.add_parser("settle", help="Settle one pending submission")
    settle.add_argument("submission_id", type=UUID)

    cancel = sub.add_parser("cancel-settlement", help="Return a settled submission to pending")
    cancel.add_argument("submission_id", type=UUID)

    bulk = sub.add_parser("bulk-settle", help="Settle every pending submission of a month")
    _add_period(bulk)

    close = sub.add_parser("close-month", help="Force-complete a month without computing amounts")
    _add_period(close)

    return p.parse_args(argv)


def _add_period(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("year", type=int)
    parser.add_argument("month", type=int)


def _parse_point(text: str) -> Coordinate:
    try:
        lat, lon = (float(part) for part in text.split(","))
    except ValueError:
        raise ValidationError("points", f"expected LAT,LON, got {text!r}") from None
    return Coordinate(lat, lon)


def _print_submission(submission) -> None:
    amount = submission.settlement_amount if submission.settlement_amount is not None else "-"
    print(
        f"  {submission.id}  driver={submission.driver_id}  "
        f"{submission.year}-{submission.month:02d}  {submission.status.value:<9}  "
        f"amount={amount}"
    )


def _run(args: argparse.Namespace, config) -> int:
    if args.command == "init-db":
        create_tables()
        print("  Tables created.")
        return 0
    if args.command == "ping":
        check_connection()
        print("  ok")
        return 0
    if args.command == "estimate-route":
        distance = estimate_route_distance(
            [_parse_point(p) for p in args.points],
            config.distance.road_correction_factor,
            config.distance.precision,
        )
        if args.round_trip:
            distance *= 2
        print(f"  {distance} km")
        return 0

    actor = ActorContext.admin(UUID(args.admin_id) if args.admin_id else CLI_ADMIN_ID)
    clock = SystemClock()
    default_rate = config.settlement.default_depreciation_rate

    with session_scope() as session:
        if args.command == "add-driver":
            driver = DriverService(session, pin_length=config.drivers.pin_length).add_driver(
                actor,
                name=args.name,
                pin=args.pin,
                vehicle_type=args.vehicle_type,
                fuel_efficiency=args.fuel_efficiency,
            )
            print(f"  Added driver {driver.name} ({driver.id})")

        elif args.command == "list-drivers":
            for driver in DriverSelector(session).list_drivers():
                print(
                    f"  {driver.id}  {driver.name:<20} {driver.vehicle_type.value:<9} "
                    f"{driver.fuel_efficiency}"
                )

        elif args.command == "set-rates":
            entry = RateService(session).save_rates(
                actor,
                args.year,
                args.month,
                gasoline_price=args.gasoline,
                diesel_price=args.diesel,
                lpg_price=args.lpg,
                electric_price=args.electric,
                depreciation_cost=args.depreciation,
            )
            print(f"  Saved rates for {entry.year}-{entry.month:02d}")

        elif args.command == "show-rates":
            entry = RateService(session).get_rates(args.year, args.month)
            if entry is None:
                print(f"  No rates set for {args.year}-{args.month:02d}")
            else:
                print(
                    f"  gasoline={entry.gasoline_price}  diesel={entry.diesel_price}  "
                    f"lpg={entry.lpg_price}  electric={entry.electric_price}  "
                    f"depreciation={entry.depreciation_cost} {config.settlement.currency}/km"
                )

        elif args.command == "list-submissions":
            status = SubmissionState(args.status) if args.status else None
            for submission in SubmissionSelector(session).list_submissions(
                args.year, args.month, status=status
            ):
                _print_submission(submission)

        elif args.command == "settle":
            submission = SubmissionService(
                session, clock=clock, default_depreciation_rate=default_rate
            ).complete(actor, args.submission_id)
            _print_submission(submission)

        elif args.command == "cancel-settlement":
            submission = SubmissionService(session, clock=clock).cancel_completion(
                actor, args.submission_id
            )
            _print_submission(submission)

        elif args.command == "bulk-settle":
            result = BulkSettlementOrchestrator(
                session, clock=clock, default_depreciation_rate=default_rate
            ).bulk_settle(actor, args.year, args.month)
            print(f"  Settled {result.success_count}, failed {result.fail_count}")
            for item in result.failures:
                print(f"  {item.submission_id}  [{item.error_code}] {item.error_message}")

        elif args.command == "close-month":
            closed = SubmissionService(session, clock=clock).close_month(
                actor, args.year, args.month
            )
            print(f"  Closed {len(closed)} submission(s)")

    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        config = get_active_config(args.config)
    except ConfigValidationError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    configure_logging(level=logging.getLevelName(config.logging.level))
    init_engine_from_url(args.db_url or config.database.url, echo=config.database.echo)

    try:
        return _run(args, config)
    except MileageError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

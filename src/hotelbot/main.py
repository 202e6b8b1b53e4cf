"""
Administrative command line for the reservation engine.

    python -m hotelbot.main init
    python -m hotelbot.main available 2024-06-01 2024-06-05
    python -m hotelbot.main check-in RSV-000012
"""
from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from hotelbot.config import get_config
from hotelbot.exceptions import ReservationError
from hotelbot.tools import get_adapter, get_reservation_service
from hotelbot.tools.reservation_tools import extract_reservation_id, parse_date

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hotelbot", description="Hotel reservation administration")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the database tables")

    available = sub.add_parser("available", help="List rooms bookable for a date range")
    available.add_argument("check_in", help="YYYY-MM-DD")
    available.add_argument("check_out", help="YYYY-MM-DD")

    for name in ("check-in", "check-out", "cancel"):
        cmd = sub.add_parser(name, help=f"{name.replace('-', ' ').capitalize()} a reservation")
        cmd.add_argument("reservation_id", help="ID or RSV-XXXXXX code")

    return parser


def run(args: argparse.Namespace) -> int:
    if args.command == "init":
        get_adapter()
        logger.info("Database ready")
        return 0

    service = get_reservation_service()
    try:
        if args.command == "available":
            rooms = service.get_available_rooms(
                parse_date(args.check_in, "check-in"), parse_date(args.check_out, "check-out")
            )
            for room in rooms:
                print(f"{room.id}\t{room.room_number}\t{room.room_type.label()}\t{room.price_per_night:.2f}")
            return 0

        res_id = extract_reservation_id(args.reservation_id)
        if args.command == "check-in":
            reservation = service.check_in(res_id)
        elif args.command == "check-out":
            reservation = service.check_out(res_id)
        else:
            reservation = service.cancel_reservation(res_id)
    except ReservationError as e:
        logger.warning(f"{args.command} failed ({e.code}): {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{reservation.get_reference_code()}\t{reservation.status.label()}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=get_config().get_log_level(),
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())

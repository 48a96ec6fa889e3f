"""
Command-line entry point for the scheduling engine.

Runs every scheduling operation against the JSON collection store in
DATA_DIR (or --data-dir), so state carries over between invocations.

Usage:
    python main.py init
    python main.py generate --start 2025-03-17 --end 2025-03-22
    python main.py slots 2025-03-17 --all
    python main.py block 2025-03-17 09:00 09:30 --reason "Staff training"
    python main.py book --name "Ana Souza" --phone "69 99283-9458" \
        --date 2025-03-17 --time 10:00 --service <service-id>
    python main.py bookings --date 2025-03-17
    python main.py status <booking-id> completed
"""

import argparse
import logging
import sys
from datetime import date, timedelta
from typing import Optional

from salon_scheduler.config import settings
from salon_scheduler.logging_context import set_request_id
from salon_scheduler.scheduler import Scheduler, create_scheduler
from salon_scheduler.scheduling.booking_engine import SchedulingError
from salon_scheduler.schemas.booking_schema import Booking, BookingStatus
from salon_scheduler.schemas.slot_schema import Slot, SlotStatus

logger = logging.getLogger(__name__)

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

STATUS_COLORS = {
    SlotStatus.AVAILABLE: GREEN,
    SlotStatus.BLOCKED: YELLOW,
    SlotStatus.BOOKED: RED,
}


def _format_slot(slot: Slot) -> str:
    color = STATUS_COLORS[slot.status]
    line = f"  {slot.time_slot}  {color}{slot.status.value:<9}{RESET}"
    if slot.status == SlotStatus.BOOKED:
        line += f" {DIM}booking {slot.booking_id}{RESET}"
    elif slot.blocked_reason:
        line += f" {DIM}{slot.blocked_reason}{RESET}"
    return line


def _format_booking(booking: Booking) -> str:
    customer = booking.customer.name if booking.customer else booking.customer_id
    services = ", ".join(
        item.service.name if item.service else item.service_id
        for item in booking.booking_services
    )
    return (
        f"  {booking.booking_date} {booking.booking_time}  {BOLD}{customer}{RESET}"
        f"  [{booking.status.value}]  {booking.total_price:.2f} / "
        f"{booking.total_duration_minutes} min  {DIM}{booking.id}{RESET}"
        + (f"\n    {services}" if services else "")
    )


# ---------------------------------------------------------------------- #
# Command handlers
# ---------------------------------------------------------------------- #


def cmd_init(scheduler: Scheduler, args: argparse.Namespace) -> None:
    print(f"{BOLD}{settings.business.name}{RESET} data ready.")
    for service in scheduler.get_services():
        print(f"  {service.id}  {service.name}  {service.price:.2f}  {service.duration_minutes} min")


def cmd_generate(scheduler: Scheduler, args: argparse.Namespace) -> None:
    start = args.start or date.today().isoformat()
    end = args.end or (
        date.fromisoformat(start) + timedelta(days=settings.schedule.generation_horizon_days)
    ).isoformat()
    created = scheduler.generate_slots(start, end)
    print(f"{GREEN}Created {created} slot(s) from {start} to {end}.{RESET}")


def cmd_slots(scheduler: Scheduler, args: argparse.Namespace) -> None:
    slots = scheduler.get_all_slots(args.date) if args.all else scheduler.get_available_slots(args.date)
    if not slots:
        print(f"{DIM}No slots on {args.date}.{RESET}")
        return
    print(f"{BOLD}Slots on {args.date}{RESET}")
    for slot in slots:
        print(_format_slot(slot))


def cmd_block(scheduler: Scheduler, args: argparse.Namespace) -> None:
    blocked = scheduler.save_blocked_slots(args.date, args.times, args.reason)
    print(f"{YELLOW}Blocked {len(blocked)} slot(s) on {args.date}.{RESET}")


def cmd_clear(scheduler: Scheduler, args: argparse.Namespace) -> None:
    removed = scheduler.delete_all_slots()
    print(f"{YELLOW}Removed {removed} unbooked slot(s).{RESET}")


def cmd_schedule(scheduler: Scheduler, args: argparse.Namespace) -> None:
    if args.action == "set":
        scheduler.save_default_schedule(
            {
                "open_time": args.open,
                "close_time": args.close,
                "slot_duration": args.duration,
                "break_start": args.break_start,
                "break_end": args.break_end,
            }
        )
    schedule = scheduler.get_default_schedule()
    brk = f"{schedule.break_start}-{schedule.break_end}" if schedule.break_start else "none"
    print(
        f"{BOLD}Default schedule{RESET}: {schedule.open_time}-{schedule.close_time}, "
        f"every {schedule.slot_duration} min, break {brk}"
    )


def cmd_services(scheduler: Scheduler, args: argparse.Namespace) -> None:
    for service in scheduler.get_services():
        print(f"  {service.id}  {service.name}  {service.price:.2f}  {service.duration_minutes} min")


def cmd_book(scheduler: Scheduler, args: argparse.Namespace) -> None:
    booking = scheduler.create_booking(
        {"name": args.name, "phone": args.phone, "email": args.email},
        args.date,
        args.time,
        args.service or [],
        args.notes,
    )
    print(f"{GREEN}Booking confirmed.{RESET}")
    print(_format_booking(booking))


def cmd_bookings(scheduler: Scheduler, args: argparse.Namespace) -> None:
    bookings = scheduler.get_bookings(args.date)
    if not bookings:
        print(f"{DIM}No bookings.{RESET}")
        return
    for booking in bookings:
        print(_format_booking(booking))


def cmd_status(scheduler: Scheduler, args: argparse.Namespace) -> None:
    booking = scheduler.update_booking_status(args.booking_id, args.status)
    if booking is None:
        print(f"{RED}Booking {args.booking_id} not found.{RESET}")
        return
    print(_format_booking(booking))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Slot and booking scheduler.")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help=f"Directory for JSON collections (default: {settings.storage.data_dir}).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Seed services and working hours.")
    p.set_defaults(handler=cmd_init)

    p = sub.add_parser("generate", help="Generate available slots for a date range.")
    p.add_argument("--start", type=str, default=None, help="First date (default: today).")
    p.add_argument("--end", type=str, default=None, help="Last date (default: start + horizon).")
    p.set_defaults(handler=cmd_generate)

    p = sub.add_parser("slots", help="List the slots of a date.")
    p.add_argument("date", type=str)
    p.add_argument("--all", action="store_true", help="Include blocked and booked slots.")
    p.set_defaults(handler=cmd_slots)

    p = sub.add_parser("block", help="Block times on a date.")
    p.add_argument("date", type=str)
    p.add_argument("times", nargs="+")
    p.add_argument("--reason", type=str, required=True)
    p.set_defaults(handler=cmd_block)

    p = sub.add_parser("clear", help="Delete every slot that is not booked.")
    p.set_defaults(handler=cmd_clear)

    p = sub.add_parser("schedule", help="Show or set the default schedule.")
    p.add_argument("action", choices=["show", "set"])
    p.add_argument("--open", type=str, default=settings.schedule.open_time)
    p.add_argument("--close", type=str, default=settings.schedule.close_time)
    p.add_argument("--duration", type=int, default=settings.schedule.slot_duration)
    p.add_argument("--break-start", type=str, default=None)
    p.add_argument("--break-end", type=str, default=None)
    p.set_defaults(handler=cmd_schedule)

    p = sub.add_parser("services", help="List bookable services.")
    p.set_defaults(handler=cmd_services)

    p = sub.add_parser("book", help="Create a booking.")
    p.add_argument("--name", type=str, required=True)
    p.add_argument("--phone", type=str, required=True)
    p.add_argument("--email", type=str, default=None)
    p.add_argument("--date", type=str, required=True)
    p.add_argument("--time", type=str, required=True)
    p.add_argument("--service", action="append", help="Service id (repeatable).")
    p.add_argument("--notes", type=str, default=None)
    p.set_defaults(handler=cmd_book)

    p = sub.add_parser("bookings", help="List bookings.")
    p.add_argument("--date", type=str, default=None)
    p.set_defaults(handler=cmd_bookings)

    p = sub.add_parser("status", help="Change a booking's status.")
    p.add_argument("booking_id", type=str)
    p.add_argument("status", choices=[s.value for s in BookingStatus])
    p.set_defaults(handler=cmd_status)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_request_id()
    scheduler = create_scheduler(data_dir=args.data_dir or settings.storage.data_dir)
    try:
        args.handler(scheduler, args)
    except (SchedulingError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"{RED}Error: {exc}{RESET}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

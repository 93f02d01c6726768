"""Payroll scheduler command line interface.

Provides operational tools for:
- Running the API server
- Listing statutory holidays
- Resolving paystub send times
- One-off pay computations

Usage:
    python -m payroll_scheduler.cli serve
    python -m payroll_scheduler.cli holidays --year 2025
    python -m payroll_scheduler.cli holidays --start 2025-01-01 --end 2025-03-31
    python -m payroll_scheduler.cli send-time --pay-date 2025-03-14 --send-at 2025-03-13
    python -m payroll_scheduler.cli compute --pay-type HOURLY --rate 20 --hours 80 --holiday-hours 8
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from decimal import Decimal
from typing import Callable

from payroll_scheduler.calculators import (
    EmployeePayProfile,
    PayEngine,
    PayGroup,
    PayRunLineItem,
    PayType,
    get_calendar,
    split_holiday_hours,
)
from payroll_scheduler.config import DEFAULT_TIMEZONE
from payroll_scheduler.errors import PayrollError
from payroll_scheduler.logging_config import configure_logging
from payroll_scheduler.services.dispatcher import isoformat_utc, resolve_dispatch_instant


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string."""
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{s}'") from None


def parse_decimal(s: str) -> Decimal:
    """Parse a decimal amount."""
    try:
        value = Decimal(s)
    except ArithmeticError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{s}'") from None
    if not value.is_finite():
        raise argparse.ArgumentTypeError(f"expected a number, got '{s}'")
    return value


def parse_day_hours(s: str) -> tuple[date, Decimal]:
    """Parse a YYYY-MM-DD=HOURS pair."""
    day, sep, hours = s.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD=HOURS, got '{s}'")
    return parse_date(day), parse_decimal(hours)


class PayrollCli:
    """Payroll scheduler command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="payroll-scheduler",
            description="Payroll scheduler tools",
        )
        parser.add_argument(
            "--log-level",
            default="WARNING",
            help="Logging level (default: WARNING)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # serve command
        serve = subparsers.add_parser("serve", help="Run the HTTP API")
        serve.add_argument("--host", help="Bind address (default: HOST env)")
        serve.add_argument("--port", type=int, help="Port (default: PORT env)")

        # holidays command
        holidays = subparsers.add_parser(
            "holidays",
            help="List statutory holidays for a year or date range",
        )
        holidays.add_argument("--year", type=int, help="Calendar year")
        holidays.add_argument("--start", type=parse_date, help="Range start (inclusive)")
        holidays.add_argument("--end", type=parse_date, help="Range end (inclusive)")
        holidays.add_argument(
            "--jurisdiction",
            default="ON",
            help="Jurisdiction code (default: ON)",
        )
        holidays.add_argument(
            "--format",
            choices=["text", "json"],
            default="text",
            help="Output format",
        )

        # send-time command
        send_time = subparsers.add_parser(
            "send-time",
            help="Resolve the UTC instant paystubs would be sent",
        )
        send_time.add_argument("--pay-date", type=parse_date, required=True)
        send_time.add_argument(
            "--send-at",
            help="Date (YYYY-MM-DD) or ISO date-time; default 09:00 on the pay date",
        )
        send_time.add_argument(
            "--timezone",
            default=DEFAULT_TIMEZONE,
            help=f"IANA timezone (default: {DEFAULT_TIMEZONE})",
        )

        # compute command
        compute = subparsers.add_parser(
            "compute",
            help="Compute one employee's pay for a period",
        )
        compute.add_argument(
            "--pay-type",
            choices=[t.value for t in PayType],
            required=True,
        )
        compute.add_argument(
            "--pay-group",
            choices=[g.value for g in PayGroup],
            default=PayGroup.BI_WEEKLY.value,
        )
        compute.add_argument("--rate", type=parse_decimal, help="Hourly rate (HOURLY)")
        compute.add_argument("--salary", type=parse_decimal, help="Annual salary (SALARY)")
        compute.add_argument("--hours", type=parse_decimal, default=Decimal("0"))
        compute.add_argument("--overtime", type=parse_decimal, default=Decimal("0"))
        compute.add_argument("--holiday-hours", type=parse_decimal, default=Decimal("0"))
        compute.add_argument(
            "--day",
            action="append",
            type=parse_day_hours,
            default=[],
            metavar="YYYY-MM-DD=HOURS",
            help="Hours worked on one day; replaces --hours and --holiday-hours",
        )
        compute.add_argument("--vacation-percent", type=parse_decimal, default=Decimal("4"))
        compute.add_argument(
            "--no-vacation",
            action="store_true",
            help="Exclude vacation pay",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(parsed.log_level)

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "serve": self._cmd_serve,
            "holidays": self._cmd_holidays,
            "send-time": self._cmd_send_time,
            "compute": self._cmd_compute,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except PayrollError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 2

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        """Run the API under uvicorn."""
        import uvicorn

        from payroll_scheduler.config import get_settings

        settings = get_settings()
        uvicorn.run(
            "payroll_scheduler.api.app:create_app",
            factory=True,
            host=args.host or settings.host,
            port=args.port or settings.port,
            log_level=settings.log_level.lower(),
        )
        return 0

    def _cmd_holidays(self, args: argparse.Namespace) -> int:
        """List holidays."""
        calendar = get_calendar(args.jurisdiction)
        if args.year is not None:
            holidays = calendar.holidays_for_year(args.year)
        elif args.start and args.end:
            holidays = calendar.holidays_in_range(args.start, args.end)
        else:
            print("Provide --year or both --start and --end", file=sys.stderr)
            return 1

        if args.format == "json":
            print(json.dumps([h.to_dict() for h in holidays], indent=2))
            return 0
        for h in holidays:
            print(f"{h.date.isoformat()}  {h.date.strftime('%a')}  {h.name}")
        return 0

    def _cmd_send_time(self, args: argparse.Namespace) -> int:
        """Print the resolved dispatch instant."""
        instant = resolve_dispatch_instant(args.pay_date, args.send_at, args.timezone)
        print(isoformat_utc(instant))
        return 0

    def _cmd_compute(self, args: argparse.Namespace) -> int:
        """Compute pay for one employee and print the breakdown as JSON."""
        pay_type = PayType(args.pay_type)
        profile = EmployeePayProfile(
            employee_id="cli",
            pay_type=pay_type,
            pay_group=PayGroup(args.pay_group),
            hourly_rate=args.rate if pay_type == PayType.HOURLY else None,
            salary=args.salary if pay_type == PayType.SALARY else None,
            vacation_pay_percent=args.vacation_percent,
        )
        hours, holiday_hours = args.hours, args.holiday_hours
        if args.day:
            hours, holiday_hours, worked = split_holiday_hours(dict(args.day), get_calendar())
            for holiday in worked:
                print(f"Worked on {holiday.name} ({holiday.date})", file=sys.stderr)
        item = PayRunLineItem(
            employee_id="cli",
            hours_worked=hours,
            overtime_hours=args.overtime,
            holiday_hours=holiday_hours,
            include_vacation=not args.no_vacation,
        )
        breakdown = PayEngine.compute(profile, item)
        rounded = {
            name: str(PayEngine.round_to_cents(Decimal(value)))
            for name, value in breakdown.to_dict().items()
        }
        print(json.dumps(rounded, indent=2))
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

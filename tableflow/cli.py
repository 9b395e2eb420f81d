"""Command-line interface for tableflow."""

import argparse
import sys
from pathlib import Path

import yaml

from tableflow.capacity import occupancy_at, occupancy_timeline
from tableflow.clock import parse_clock
from tableflow.conflicts import conflicts_for
from tableflow.ghost import ghost_slots
from tableflow.logging_config import configure_logging
from tableflow.models import BookingSelection, PartyRequest
from tableflow.optimizer import assign_parties
from tableflow.output import (
    format_batch,
    format_ghosts,
    format_occupancy,
    format_ranking,
    format_slots,
    format_warnings,
    format_window,
)
from tableflow.parser import create_venue_template, load_venue
from tableflow.ranking import rank, summarize
from tableflow.store import DataIntegrityError


def _clock_arg(value: str) -> int:
    minute = parse_clock(value)
    if minute is None:
        raise argparse.ArgumentTypeError(f"not a clock time: {value!r}")
    return minute


def _party_arg(value: str) -> PartyRequest:
    # id:size@HH:MM[/duration][#zone]
    try:
        ident, rest = value.split(":", 1)
        size, rest = rest.split("@", 1)
        zone = "any"
        if "#" in rest:
            rest, zone = rest.split("#", 1)
        duration = 0
        if "/" in rest:
            rest, dur = rest.split("/", 1)
            duration = int(dur)
        start = _clock_arg(rest)
        return PartyRequest(
            id=ident, party_size=int(size), start=start, duration=duration, zone=zone
        )
    except (ValueError, argparse.ArgumentTypeError) as e:
        raise argparse.ArgumentTypeError(f"bad party {value!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Answer table availability questions for a restaurant floor.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  tableflow venue.yaml window T12 --at 19:30
  tableflow venue.yaml slots --party 4 --period dinner --now 19:23
  tableflow venue.yaml rank --party 4 --at 19:30 --duration 90
  tableflow venue.yaml conflicts --party 4 --at 19:30 --table T12 --guest g3
  tableflow venue.yaml occupancy --period dinner
  tableflow venue.yaml ghosts --period dinner --now 19:23
  tableflow venue.yaml assign w1:2@19:45 w2:6@20:00/105#patio
  tableflow venue.yaml template
""",
    )
    parser.add_argument("venue", type=Path, help="Path to the venue YAML file")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    commands = parser.add_subparsers(dest="command", required=True)

    window = commands.add_parser("window", help="Free window for one table")
    window.add_argument("table", help="Table id")
    window.add_argument("--at", type=_clock_arg, required=True, help="Requested start")
    window.add_argument("--party", type=int, default=2, help="Party size (default: 2)")
    window.add_argument("--period", help="Service period id (default: inferred)")

    slots = commands.add_parser("slots", help="Bookable start times in a service period")
    slots.add_argument("--party", type=int, default=2, help="Party size (default: 2)")
    slots.add_argument("--period", required=True, help="Service period id")
    slots.add_argument("--table", help="Restrict to one table")
    slots.add_argument("--zone", default="any", help="Zone preference (default: any)")
    slots.add_argument("--duration", type=int, help="Stay length (default: policy for party)")
    slots.add_argument("--now", type=_clock_arg, help="Current time, for hiding past slots")

    ranking = commands.add_parser("rank", help="Rank tables for a party")
    ranking.add_argument("--party", type=int, required=True, help="Party size")
    ranking.add_argument("--at", type=_clock_arg, required=True, help="Requested start")
    ranking.add_argument("--duration", type=int, help="Stay length (default: policy for party)")
    ranking.add_argument("--zone", default="any", help="Zone preference (default: any)")
    ranking.add_argument("--weight", type=int, help="Penalty per surplus seat")

    conflicts = commands.add_parser("conflicts", help="Warnings for a booking selection")
    conflicts.add_argument("--party", type=int, required=True, help="Party size")
    conflicts.add_argument("--at", type=_clock_arg, required=True, help="Requested start")
    conflicts.add_argument("--table", help="Selected table id")
    conflicts.add_argument("--duration", type=int, help="Stay length (default: policy for party)")
    conflicts.add_argument("--guest", help="Guest id from the venue file")
    conflicts.add_argument("--day", help="Weekday of the booking (mon..sun)")

    occupancy = commands.add_parser("occupancy", help="Seat occupancy")
    occupancy.add_argument("--period", help="Service period id for a timeline")
    occupancy.add_argument("--at", type=_clock_arg, help="Single instant")
    occupancy.add_argument("--step", type=int, default=30, help="Timeline step (default: 30)")

    ghosts = commands.add_parser("ghosts", help="When occupied tables free up")
    ghosts.add_argument("--period", required=True, help="Service period id")
    ghosts.add_argument("--now", type=_clock_arg, required=True, help="Current time")

    assign = commands.add_parser("assign", help="Place several waiting parties at once")
    assign.add_argument(
        "parties",
        nargs="+",
        type=_party_arg,
        help="Parties as id:size@HH:MM[/duration][#zone]",
    )

    commands.add_parser("template", help="Write a starter venue file to VENUE")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for tableflow CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.json_logs)

    if args.command == "template":
        if args.venue.exists():
            print(f"Error: Refusing to overwrite {args.venue}", file=sys.stderr)
            return 1
        create_venue_template(args.venue)
        print(f"Created venue template at: {args.venue}")
        return 0

    # Validate venue file exists
    if not args.venue.exists():
        print(f"Error: Venue file not found: {args.venue}", file=sys.stderr)
        return 1

    try:
        venue, resolver = load_venue(args.venue)
    except DataIntegrityError as e:
        print(f"Error: Inconsistent venue data: {e}", file=sys.stderr)
        return 1
    except (yaml.YAMLError, KeyError, ValueError, TypeError) as e:
        print(f"Error parsing venue file: {e}", file=sys.stderr)
        return 1

    periods = {p.id: p for p in venue.service_periods}
    period = None
    if getattr(args, "period", None):
        period = periods.get(args.period)
        if period is None:
            print(f"Error: Unknown service period: {args.period}", file=sys.stderr)
            return 1

    try:
        if args.command == "window":
            table = resolver.store.table(args.table)
            window = resolver.continuous_window(table.id, args.at, period)
            limit = resolver.max_duration_at(table.id, args.at, period, party_size=args.party)
            print(format_window(table.display_label, args.at, window, limit))

        elif args.command == "slots":
            duration = args.duration or resolver.duration_for_party(args.party)
            times = resolver.available_start_times(
                args.table, duration, period, now=args.now, party_size=args.party, zone=args.zone
            )
            print(format_slots(times, title=f"{period.label or period.id} for {args.party}"))

        elif args.command == "rank":
            duration = args.duration or resolver.duration_for_party(args.party)
            ranked = rank(resolver, args.at, duration, args.party, args.zone, weight=args.weight)
            summary = summarize(ranked, resolver.policy.opens_soon_minutes)
            print(format_ranking(summary, args.party, args.at))

        elif args.command == "conflicts":
            guest = None
            if args.guest:
                guest = venue.guests.get(args.guest)
                if guest is None:
                    print(f"Error: Unknown guest: {args.guest}", file=sys.stderr)
                    return 1
            selection = BookingSelection(
                start=args.at,
                party_size=args.party,
                table_id=args.table,
                duration=args.duration,
                weekday=args.day,
            )
            print(format_warnings(conflicts_for(resolver, selection, guest)))

        elif args.command == "occupancy":
            if args.at is not None:
                print(format_occupancy([occupancy_at(resolver.store, args.at)]))
            elif period is not None:
                print(format_occupancy(occupancy_timeline(resolver.store, period, args.step)))
            else:
                print("Error: Give --at or --period", file=sys.stderr)
                return 1

        elif args.command == "ghosts":
            labels = {t.id: t.display_label for t in resolver.store.tables}
            print(format_ghosts(ghost_slots(resolver.store, period, args.now), labels))

        elif args.command == "assign":
            requests = [
                party
                if party.duration
                else PartyRequest(
                    id=party.id,
                    party_size=party.party_size,
                    start=party.start,
                    duration=resolver.duration_for_party(party.party_size),
                    zone=party.zone,
                )
                for party in args.parties
            ]
            print(format_batch(assign_parties(resolver, requests)))

    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

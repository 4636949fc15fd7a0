"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from datetime import datetime, time
from pathlib import Path
from typing import Optional

NICHE_CHOICES = ["creator", "coach", "podcaster", "freelancer"]
PERIOD_CHOICES = ["month", "quarter", "year", "custom"]


def _add_opportunity_fields(parser: argparse.ArgumentParser) -> None:
    """Fields shared by `opportunity add` and `opportunity update`."""
    parser.add_argument("--value", type=float, default=None, help="Deal value in dollars")
    parser.add_argument("--status", type=str, default=None, help="Canonical status, alias or pipeline stage id")
    parser.add_argument("--niche", choices=NICHE_CHOICES, default=None)
    parser.add_argument("--probability", type=int, default=None, help="Win probability 0-100")
    parser.add_argument("--client-id", type=str, default=None)
    parser.add_argument("--description", type=str, default=None)
    parser.add_argument("--expected-close", type=str, default=None, help="Expected close date/time (local)")
    parser.add_argument("--follow-up", type=str, default=None, help="Follow-up date/time (local)")
    parser.add_argument("--notes", type=str, default=None)
    parser.add_argument("--tag", action="append", default=None, dest="tags", help="Tag (repeatable)")
    parser.add_argument(
        "--field",
        action="append",
        default=None,
        dest="fields",
        metavar="KEY=VALUE",
        help="Custom field, e.g. --field brandName=Acme (repeatable)",
    )
    parser.add_argument("--timezone", type=str, default=None, help="IANA timezone of the entered dates")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tango-crm", description="Tango CRM opportunity and revenue tools")
    parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    parser.add_argument("--config", type=Path, default=None, help="Path to settings YAML")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # map-stage
    map_parser = subparsers.add_parser("map-stage", help="Resolve a stage id or alias to a canonical status")
    map_parser.add_argument("stage", help="Stage id, alias or canonical status")
    map_parser.add_argument("--niche", choices=NICHE_CHOICES, default=None)

    # opportunity
    opp_parser = subparsers.add_parser("opportunity", help="Create, update and query opportunities")
    opp_sub = opp_parser.add_subparsers(dest="action", required=True)

    add_parser = opp_sub.add_parser("add", help="Create an opportunity")
    add_parser.add_argument("--user", required=True, help="Owner user id")
    add_parser.add_argument("--title", required=True)
    _add_opportunity_fields(add_parser)

    update_parser = opp_sub.add_parser("update", help="Update fields of an opportunity")
    update_parser.add_argument("id", help="Opportunity id")
    update_parser.add_argument("--user", required=True, help="Owner user id")
    update_parser.add_argument("--title", default=None)
    _add_opportunity_fields(update_parser)

    show_parser = opp_sub.add_parser("show", help="Show one opportunity")
    show_parser.add_argument("id", help="Opportunity id")
    show_parser.add_argument("--user", required=True, help="Owner user id")
    show_parser.add_argument("--timezone", type=str, default=None, help="Display dates in this zone")

    list_parser = opp_sub.add_parser("list", help="List opportunities, newest first")
    list_parser.add_argument("--user", required=True, help="Owner user id")
    list_parser.add_argument("--niche", choices=NICHE_CHOICES, default=None)

    delete_parser = opp_sub.add_parser("delete", help="Delete an opportunity")
    delete_parser.add_argument("id", help="Opportunity id")
    delete_parser.add_argument("--user", required=True, help="Owner user id")

    # growth
    growth_parser = subparsers.add_parser("growth", help="Revenue growth rate for a niche")
    growth_parser.add_argument("--user", required=True, help="Owner user id")
    growth_parser.add_argument("--niche", choices=NICHE_CHOICES, required=True)
    growth_parser.add_argument("--period", choices=PERIOD_CHOICES, default="month")
    growth_parser.add_argument("--start", type=str, default=None, help="Custom window start (YYYY-MM-DD or ISO)")
    growth_parser.add_argument("--end", type=str, default=None, help="Custom window end (YYYY-MM-DD or ISO)")
    growth_parser.add_argument("--precision", type=int, default=None, help="Decimal places for the rate")
    growth_parser.add_argument(
        "--trend",
        type=int,
        default=None,
        metavar="N",
        help="Trend over N consecutive periods instead of a single comparison",
    )
    growth_parser.add_argument("--format", choices=["json", "csv"], default="json")
    growth_parser.add_argument("--output", type=Path, default=None, help="Write to file (default: stdout)")

    # due
    due_parser = subparsers.add_parser("due", help="Due-date phrasing for a stored UTC timestamp")
    due_parser.add_argument("date", help="UTC timestamp or date")
    due_parser.add_argument("--timezone", type=str, default=None)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _load_settings(args)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "map-stage":
        _run_map_stage(args)
    elif args.command == "opportunity":
        _run_opportunity(args, settings)
    elif args.command == "growth":
        _run_growth(args, settings)
    elif args.command == "due":
        _run_due(args, settings)
    else:
        parser.print_help()


def _load_settings(args: argparse.Namespace):
    from tango_crm.config import Settings

    settings = Settings.from_yaml(args.config) if args.config else Settings.from_env()
    if args.db is not None:
        settings = settings.model_copy(update={"db_path": args.db, "store_backend": "sqlite"})
    return settings


def _emit(output: str, path: Optional[Path] = None) -> None:
    if path:
        path.write_text(output, encoding="utf-8")
        print(f"Wrote {path}", file=sys.stderr)
    else:
        print(output)


def _parse_fields(pairs: Optional[list[str]]) -> dict:
    fields: dict = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"Invalid --field {pair!r}. Use KEY=VALUE.")
        fields[key.strip()] = value.strip()
    return fields


def _run_map_stage(args: argparse.Namespace) -> None:
    """Run map-stage command."""
    from tango_crm.mapping import map_niche_to_type, map_stage_to_status, map_status_to_stage_id

    status = map_stage_to_status(args.stage, args.niche)
    result = {
        "input": args.stage,
        "niche": args.niche,
        "status": status,
        "type": map_niche_to_type(args.niche),
        "stage_id": map_status_to_stage_id(status, args.niche),
    }
    print(json.dumps(result, indent=2))


def _opportunity_payload(args: argparse.Namespace) -> dict:
    """Options actually given on the command line, keyed by model field name."""
    payload = {
        "title": args.title,
        "value": args.value,
        "status": args.status,
        "niche": args.niche,
        "probability": args.probability,
        "client_id": args.client_id,
        "description": args.description,
        "expected_close_date": args.expected_close,
        "follow_up_date": args.follow_up,
        "notes": args.notes,
        "tags": args.tags,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    fields = _parse_fields(args.fields)
    if fields:
        payload["custom_fields"] = fields
    return payload


def _write_result_json(result) -> str:
    return json.dumps(
        {
            "opportunity": result.opportunity.model_dump(mode="json"),
            "side_effects": [
                {"name": s.name, "status": s.status, "detail": s.detail, "error": s.error}
                for s in result.side_effects
            ],
        },
        indent=2,
    )


def _run_opportunity(args: argparse.Namespace, settings) -> None:
    """Run opportunity command."""
    from pydantic import ValidationError

    from tango_crm.dates import format_display
    from tango_crm.errors import RecordNotFoundError, StoreError
    from tango_crm.models import OpportunityCreate, OpportunityUpdate
    from tango_crm.opportunities import OpportunityService
    from tango_crm.store import open_store

    service = OpportunityService(open_store(settings), settings=settings)
    try:
        if args.action == "add":
            data = OpportunityCreate.model_validate(_opportunity_payload(args))
            print(_write_result_json(service.create(args.user, data, user_timezone=args.timezone)))
        elif args.action == "update":
            data = OpportunityUpdate.model_validate(_opportunity_payload(args))
            print(_write_result_json(service.update(args.user, args.id, data, user_timezone=args.timezone)))
        elif args.action == "show":
            opp = service.get(args.user, args.id)
            if opp is None:
                raise SystemExit(f"Opportunity not found: {args.id}")
            data = opp.model_dump(mode="json")
            tz = args.timezone or opp.user_timezone
            data["display"] = {
                "expected_close_date": format_display(opp.expected_close_date, tz)
                if opp.expected_close_date
                else None,
                "timezone": tz,
            }
            print(json.dumps(data, indent=2))
        elif args.action == "list":
            opps = service.list(args.user, niche=args.niche)
            print(json.dumps([o.model_dump(mode="json") for o in opps], indent=2))
        elif args.action == "delete":
            service.delete(args.user, args.id)
            print(f"Deleted {args.id}")
    except RecordNotFoundError as e:
        raise SystemExit(str(e))
    except ValidationError as e:
        raise SystemExit(f"Invalid opportunity data:\n{e}")
    except StoreError as e:
        raise SystemExit(f"Store error: {e}")


def _parse_bound(value: Optional[str], tz: str, end: bool = False) -> Optional[datetime]:
    """Window bound from the command line; a bare end date covers that whole day."""
    from tango_crm.dates import parse_datetime, resolve_zone

    if value is None:
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise SystemExit(f"Invalid date: {value}")
    if end and len(value.strip()) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=resolve_zone(tz))
    return parsed


def _run_growth(args: argparse.Namespace, settings) -> None:
    """Run growth command."""
    from tango_crm.growth import RevenueGrowthCalculator, to_csv, to_json
    from tango_crm.store import open_store

    calculator = RevenueGrowthCalculator(open_store(settings), settings=settings)
    try:
        if args.trend:
            period = args.period if args.period != "custom" else "month"
            results = calculator.calculate_trend_analysis(args.user, args.niche, args.trend, period)
        else:
            start = _parse_bound(args.start, settings.reporting_timezone)
            end = _parse_bound(args.end, settings.reporting_timezone, end=True)
            results = [
                calculator.calculate_growth_rate(
                    args.user,
                    args.niche,
                    args.period,
                    start=start,
                    end=end,
                    precision=args.precision,
                )
            ]
    except ValueError as e:
        raise SystemExit(str(e))

    output = to_csv(results) if args.format == "csv" else to_json(results)
    _emit(output, args.output)


def _run_due(args: argparse.Namespace, settings) -> None:
    """Run due command."""
    from tango_crm.dates import due_date_relative_time, format_display, is_overdue, relative_time

    tz = args.timezone or settings.default_timezone
    phrase = due_date_relative_time(args.date, tz)
    if not phrase:
        raise SystemExit(f"Invalid date: {args.date}")
    result = {
        "due": phrase,
        "overdue": is_overdue(args.date, tz),
        "relative": relative_time(args.date),
        "display": format_display(args.date, tz),
        "timezone": tz,
    }
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Print fleet statistics or export the report CSV.

This script signs in, loads the dashboard and report views through
:class:`pybusfleet.FleetConsole`, and prints them. With ``--csv`` it
writes the report export instead.

Usage
-----
Set environment variables and run::

    export FLEET_PROJECT_ID="my-project"
    export FLEET_API_KEY="AIza..."
    export FLEET_EMAIL="admin@example.com"
    export FLEET_PASSWORD="your-password"
    python scripts/fleet_report.py

Options::

    --csv [FILE]         Write the report CSV (default file name if omitted)
    --buses              Also list buses with their driver and route
    --drivers            Also list drivers with their assigned bus
    --search TERM        Filter the bus/driver listings
    --days N             Report period length in days (default: 30)
    --json               Output as machine-readable JSON
    --create-demo        Create the demo administrator account and exit
    -v, --verbose        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pybusfleet import (  # noqa: E402
    FleetClient,
    FleetConfig,
    FleetConsole,
    FleetError,
    LoggingNotifier,
    ReportDateRange,
    report_filename,
)
from pybusfleet.resolver import filter_bus_views, filter_driver_views  # noqa: E402

_logger = logging.getLogger("fleet_report")


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _table(rows: list[tuple[str, ...]], headers: tuple[str, ...]) -> str:
    widths = [max(len(str(cell)) for cell in column) for column in zip(headers, *rows, strict=False)]
    lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths, strict=True))]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(str(cell).ljust(w) for cell, w in zip(row, widths, strict=True)))
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> int:
    config = FleetConfig.from_env()
    notifier = LoggingNotifier(_logger)

    async with FleetClient(config, notifier=notifier) as client:
        if args.create_demo:
            await client.create_demo_account()
            return 0

        email = args.email or os.environ.get("FLEET_EMAIL", "")
        password = args.password or os.environ.get("FLEET_PASSWORD", "")
        if not email or not password:
            _logger.error("Set FLEET_EMAIL and FLEET_PASSWORD (or pass --email/--password)")
            return 2
        await client.login(email, password)

        console = FleetConsole(client, notifier)
        dashboard, report = await asyncio.gather(console.load_dashboard(), console.load_report())
        if not dashboard.ok or not report.ok:
            return 1

        if args.csv is not None:
            csv_text = console.export_report(ReportDateRange.last_days(args.days))
            if csv_text is None:
                return 1
            target = Path(args.csv or report_filename())
            target.write_text(csv_text, encoding="utf-8")
            print(f"Wrote {target}")
            return 0

        output: dict[str, Any] = {
            "dashboard": dashboard.value.model_dump(by_alias=True) if dashboard.value else None,
            "report": report.value.model_dump(by_alias=True) if report.value else None,
        }
        out: list[str] = []
        if dashboard.value is not None:
            stats = dashboard.value
            out.append(_section("Dashboard"))
            out.append(f"  Total drivers : {stats.total_drivers}")
            out.append(f"  Total buses   : {stats.total_buses}")
            out.append(f"  Total routes  : {stats.total_routes}")
            out.append(
                f"  Active today  : {stats.active_today} of {stats.total_drivers} "
                f"({stats.active_today_utilization}%)"
            )
        if report.value is not None:
            out.append(_section("Report"))
            out.extend(f"  {line}" for line in report.value.summary_lines())
            out.append(f"  Unassigned buses: {report.value.unassigned_buses}")

        if args.buses:
            result = await console.load_bus_view()
            views = filter_bus_views(result.value or [], args.search)
            output["buses"] = [view.model_dump(by_alias=True) for view in views]
            out.append(_section("Buses"))
            out.append(
                _table(
                    [(v.bus_number, v.driver_display_name, v.route_display_name) for v in views],
                    ("Bus Number", "Driver", "Route"),
                )
            )

        if args.drivers:
            result = await console.load_driver_view()
            drivers = filter_driver_views(result.value or [], args.search)
            output["drivers"] = [view.model_dump(by_alias=True) for view in drivers]
            out.append(_section("Drivers"))
            out.append(
                _table(
                    [(v.name, v.phone_number, v.assigned_bus_number or "-") for v in drivers],
                    ("Name", "Phone Number", "Assigned Bus"),
                )
            )

    if args.json:
        print(json.dumps(output, indent=2, default=str, ensure_ascii=False))
    else:
        print("\n".join(out))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Print bus-fleet statistics or export the report CSV")
    parser.add_argument("--email", default="", help="Administrator email (default: $FLEET_EMAIL)")
    parser.add_argument("--password", default="", help="Administrator password (default: $FLEET_PASSWORD)")
    parser.add_argument("--csv", nargs="?", const="", default=None, metavar="FILE", help="Write the report CSV")
    parser.add_argument("--buses", action="store_true", help="List buses")
    parser.add_argument("--drivers", action="store_true", help="List drivers")
    parser.add_argument("--search", default="", help="Filter listed buses/drivers")
    parser.add_argument("--days", type=int, default=30, help="Report period length in days")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--create-demo", action="store_true", help="Create the demo admin account")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        code = asyncio.run(run(args))
    except FleetError as exc:
        _logger.error("%s", exc)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()

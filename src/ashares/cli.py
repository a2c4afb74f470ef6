"""Click-based CLI for ashares.

Thin wrapper around ``ashares.prices``. Every command builds one request,
prints the bars, and exits non-zero on any ashares error.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ashares import __version__

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from ashares.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _parse_periods(value: str | None) -> list[int]:
    """Convert "5,10,20" to [5, 10, 20]."""
    if not value:
        return []
    try:
        periods = [int(p) for p in value.split(",") if p.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated integers, got {value!r}")
    if any(p < 1 for p in periods):
        raise click.BadParameter("periods must be positive")
    return periods


def _fetch(ctx: click.Context, operation, *args, **kwargs):
    """Run one async fetch on a private client and return its bars."""
    from ashares.core import AsharesError
    from ashares.ingestion import AsharesClient

    config = _load_config(ctx)

    async def _run():
        async with AsharesClient(config) as client:
            return await operation(*args, client=client, **kwargs)

    try:
        return _run_async(_run())
    except AsharesError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        if ctx.obj["verbose"] and exc.context:
            console.print(exc.context)
        raise SystemExit(1)


def _output_bars(bars, output_format: str, title: str) -> None:
    if output_format == "json":
        _output_bars_json(bars)
    else:
        _output_bars_table(bars, title)


def _output_bars_table(bars, title: str) -> None:
    """Render bars as a Rich table."""
    periods = sorted({ma.period for b in bars for ma in (b.moving_averages or ())})

    table = Table(title=title)
    table.add_column("Time", style="bold")
    for name in ("Open", "High", "Low", "Close", "Volume"):
        table.add_column(name, justify="right")
    for p in periods:
        table.add_column(f"MA{p}", justify="right")

    for b in bars:
        row = [
            str(b.time),
            f"{b.open:.2f}",
            f"{b.high:.2f}",
            f"{b.low:.2f}",
            f"{b.close:.2f}",
            f"{b.volume:.0f}",
        ]
        for p in periods:
            ma = b.moving_average(p)
            row.append(f"{ma.value:.3f}" if ma else "")
        table.add_row(*row)

    console.print(table)


def _output_bars_json(bars) -> None:
    """Write bars as JSON to stdout."""
    output = [b.model_dump(mode="json") for b in bars]
    click.echo(json.dumps(output, indent=2, ensure_ascii=False))


_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="ASHARES_CONFIG",
    default=None,
    help="Path to ashares.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(version=__version__, package_name="ashares")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """ashares: A-share price bars from Tencent and Sina."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# day
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("code")
@click.option("--count", "-n", type=click.IntRange(min=1), default=10, help="Number of bars.")
@click.option(
    "--frequency",
    "-f",
    type=click.Choice(["1d", "1w", "1M"]),
    default="1d",
    help="Bar size: day, week or month.",
)
@click.option(
    "--end-date",
    "-e",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Last bar date (YYYY-MM-DD). Default: most recent.",
)
@_format_option
@click.pass_context
def day(
    ctx: click.Context,
    code: str,
    count: int,
    frequency: str,
    end_date: datetime | None,
    output_format: str,
) -> None:
    """Forward-adjusted day/week/month bars from Tencent."""
    from ashares.prices import fetch_day_week_month

    end = end_date.date() if end_date else None
    bars = _fetch(ctx, fetch_day_week_month, code, end, count, frequency)
    _output_bars(bars, output_format, f"{code} {frequency}")


# ---------------------------------------------------------------------------
# minute
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("code")
@click.option("--count", "-n", type=click.IntRange(min=1), default=10, help="Number of bars.")
@click.option(
    "--frequency",
    "-f",
    type=str,
    default="1m",
    help="Bar size in minutes, e.g. 1m, 5m, 30m.",
)
@_format_option
@click.pass_context
def minute(
    ctx: click.Context, code: str, count: int, frequency: str, output_format: str
) -> None:
    """Intraday minute bars from Tencent, last close set to the live price."""
    from ashares.prices import fetch_minute

    bars = _fetch(ctx, fetch_minute, code, count, frequency)
    _output_bars(bars, output_format, f"{code} {frequency}")


# ---------------------------------------------------------------------------
# ma
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("code")
@click.option("--count", "-n", type=click.IntRange(min=1), default=10, help="Number of bars.")
@click.option(
    "--frequency",
    "-f",
    type=str,
    default="1d",
    help="1d, 1w, 1M or <N>m (e.g. 30m).",
)
@click.option(
    "--ma",
    "periods",
    type=str,
    default="5,10,20",
    help="Comma-separated moving-average windows (5, 10, 15, 20, 30).",
)
@_format_option
@click.pass_context
def ma(
    ctx: click.Context,
    code: str,
    count: int,
    frequency: str,
    periods: str,
    output_format: str,
) -> None:
    """Bars with moving averages from Sina."""
    from ashares.prices import fetch_with_moving_averages

    period_list = _parse_periods(periods)
    bars = _fetch(ctx, fetch_with_moving_averages, code, count, frequency, period_list)
    _output_bars(bars, output_format, f"{code} {frequency}")

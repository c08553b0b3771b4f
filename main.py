import sys
import asyncio
import argparse
from datetime import date

# --- Settings/Logging ---
from usopen_live.logging.setup import setup_logging
from usopen_live.config.settings import settings

setup_logging()

from loguru import logger

# --- End Settings/Logging ---

from usopen_live.api.app import build_match_service, create_app
from usopen_live.feeds.base_client import build_http_client
from usopen_live.models.enums import Gender
from usopen_live.api.routes import InvalidRequest, validate_date, validate_gender
from usopen_live.poller.live_poller import LivePoller, render_matches
from usopen_live.utils.time_utils import (
    current_home_date,
    format_date_for_display,
    tournament_dates,
    utc_now_iso,
)

import httpx
import uvicorn
from rich import print
from rich.console import Console
from rich.live import Live
from rich.panel import Panel


async def show(gender: Gender, date_iso: str) -> None:
    """Fetches and prints one day's matches without starting the API."""
    http_client = build_http_client(settings.feed_timeout_seconds)
    try:
        service = build_match_service(settings, http_client)
        grouped = await service.get_matches_by_date(gender, date_iso)
    finally:
        await http_client.aclose()

    payload = {"date": date_iso, "gender": gender.value, **grouped.to_api()}
    print(
        Panel(
            f"{gender.value.title()}'s singles - {date_iso} (generated {utc_now_iso()})",
            style="bold blue",
        )
    )
    print(render_matches(payload, settings.home_timezone))


async def watch(base_url: str, gender: Gender, date_iso: str) -> None:
    """Polls a running API and redraws the scoreboard in place."""
    console = Console()
    async with httpx.AsyncClient(timeout=10.0) as client:
        with Live(console=console, auto_refresh=False) as live:
            poller = LivePoller(
                client,
                base_url,
                gender.value,
                date_iso,
                interval=settings.poll_interval_seconds,
                home_timezone=settings.home_timezone,
                on_update=lambda state: live.update(
                    render_matches(state, settings.home_timezone), refresh=True
                ),
            )
            await poller.run()
    if not poller.should_poll():
        logger.info(f"{date_iso} is not today; showing a single snapshot.")


def serve(host: str, port: int) -> None:
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


def print_dates() -> None:
    today = current_home_date(settings.home_timezone)
    for date_iso in tournament_dates(
        settings.tournament_start_date, settings.tournament_end_date
    ):
        label = format_date_for_display(date.fromisoformat(date_iso))
        marker = " [bold green]<- today[/bold green]" if date_iso == today else ""
        print(f"{date_iso}  {label}{marker}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="US Open live scores service.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_cmd = sub.add_parser("serve", help="Run the HTTP API.")
    serve_cmd.add_argument("--host", default=settings.api_host)
    serve_cmd.add_argument("--port", type=int, default=settings.api_port)

    for name, help_text in (
        ("show", "Print one day's matches."),
        ("watch", "Follow a day's matches from a running API."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("gender", choices=[g.value for g in Gender])
        cmd.add_argument("date", nargs="?", default=None, help="YYYY-MM-DD (default: today)")
        if name == "watch":
            cmd.add_argument(
                "--url", default=f"http://{settings.api_host}:{settings.api_port}"
            )

    sub.add_parser("dates", help="List the tournament's days.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        serve(args.host, args.port)
        return 0
    if args.command == "dates":
        print_dates()
        return 0

    try:
        gender = validate_gender(args.gender)
        date_iso = validate_date(args.date or current_home_date(settings.home_timezone))
    except InvalidRequest as e:
        logger.error(str(e))
        return 2

    if args.command == "show":
        asyncio.run(show(gender, date_iso))
    else:
        asyncio.run(watch(args.url, gender, date_iso))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)

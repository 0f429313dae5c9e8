"""Terminal weather dashboard: current conditions, hourly and 5-day forecast."""
import argparse
import logging
import os
import signal
import sys
import time
from typing import Optional, Tuple

from dotenv import load_dotenv

from city_search import DEFAULT_CITY_LIST, CitySearch, load_city_list
from dashboard import WeatherDashboard
from formatting import render_history, render_state
from geolocation import ConfiguredGeolocationProvider
from history_store import JsonHistoryStore
from image_provider import PexelsImageProvider
from openweather_provider import OpenWeatherProvider
from weather_service import WeatherService

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather-dash.log")
DEFAULT_HISTORY_FILE = os.path.join(os.path.expanduser("~"), ".weatherdash", "history.json")
TABS = ["current", "hourly", "forecast"]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Terminal weather dashboard")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--city", help="City name to search for")
    target.add_argument("--here", action="store_true", help="Use WEATHER_LAT/WEATHER_LON as the current position")
    target.add_argument("--coords", nargs=2, type=float, metavar=("LAT", "LON"))
    parser.add_argument("--units", choices=["metric", "imperial"], default="metric")
    parser.add_argument("--display-units", choices=["metric", "imperial"], help="Convert fetched data before display")
    parser.add_argument("--tab", choices=TABS + ["all"], default="all")
    parser.add_argument("--watch", action="store_true", help="Keep refreshing silently")
    parser.add_argument("--refresh", type=float, default=300.0, help="Seconds between refreshes")
    parser.add_argument("--history", action="store_true", help="Show recent searches")
    parser.add_argument("--clear-history", action="store_true")
    parser.add_argument("--cache-ttl", type=int, default=240)
    parser.add_argument("--max-retries", type=int, default=3)
    parser.add_argument("--retry-delay", type=float, default=1.0)
    parser.add_argument("--timeout", type=int, default=10, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def load_config() -> Tuple[str, Optional[str], str]:
    load_dotenv()
    api_key = os.getenv("OPENWEATHER_API_KEY") or os.getenv("WEATHER_API_KEY")
    pexels_key = os.getenv("PEXELS_API_KEY")
    lang = os.getenv("WEATHER_LANG", "en")

    if not api_key:
        raise SystemExit("Missing OPENWEATHER_API_KEY in environment")
    if not pexels_key:
        logging.info("PEXELS_API_KEY not set, background images fall back to defaults")

    logging.info("Configuration loaded: lang=%s", lang)
    return api_key, pexels_key, lang


def build_dashboard(args: argparse.Namespace) -> WeatherDashboard:
    api_key, pexels_key, lang = load_config()
    provider = OpenWeatherProvider(api_key=api_key, lang=lang, timeout=args.timeout)
    service = WeatherService(
        provider=provider,
        cache_ttl_seconds=args.cache_ttl,
        max_retries=args.max_retries,
        retry_delay_seconds=args.retry_delay,
    )
    dashboard = WeatherDashboard(
        weather_service=service,
        image_provider=PexelsImageProvider(pexels_key, timeout=args.timeout),
        history_store=JsonHistoryStore(os.getenv("WEATHER_HISTORY_FILE", DEFAULT_HISTORY_FILE)),
        geolocation=ConfiguredGeolocationProvider(),
        units=args.units,
    )
    logging.info("Weather dashboard ready (cache ttl=%ss)", args.cache_ttl)
    return dashboard


def show(dashboard: WeatherDashboard, tab: str) -> None:
    state = dashboard.state
    tabs = TABS if tab == "all" else [tab]
    for name in tabs:
        state = dashboard.select_tab(name)
        if len(tabs) > 1:
            print(f"== {name.capitalize()} ==")
        for line in render_state(state):
            print(line)
        if state.error or state.current is None:
            break
    if state.image_url:
        print(f"Background: {state.image_url}")


def fetch(dashboard: WeatherDashboard, args: argparse.Namespace) -> bool:
    if args.city:
        cities = load_city_list(os.getenv("WEATHER_CITY_LIST", DEFAULT_CITY_LIST))
        city = CitySearch(cities).lookup(args.city)
        if city is None:
            print(f"No city matching '{args.city}'")
            return False
        dashboard.search_city(city.lat, city.lon, city.name, city.country)
    elif args.here:
        dashboard.use_current_location()
    elif args.coords:
        dashboard.fetch_weather(args.coords[0], args.coords[1])
    elif dashboard.state.history:
        entry = dashboard.state.history[0]
        dashboard.search_city(entry.lat, entry.lon, entry.name, entry.country)
    else:
        print("Nothing to show: pass --city, --coords or --here")
        return False

    if args.display_units:
        dashboard.toggle_units(args.display_units)
    return dashboard.state.current is not None


def signal_handler(signum, frame):
    logging.info("Received signal %s, shutting down", signum)
    raise KeyboardInterrupt()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    dashboard = build_dashboard(args)

    try:
        if args.clear_history:
            dashboard.clear_history()
            print("Search history cleared")
            return 0
        if args.history:
            for line in render_history(dashboard.state):
                print(line)
            return 0

        ok = fetch(dashboard, args)
        show(dashboard, args.tab)
        if not args.watch:
            return 0 if ok else 1

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
        while True:
            time.sleep(max(args.refresh, 1.0))
            logging.info("Silent refresh")
            dashboard.refresh(silent=True)
            show(dashboard, args.tab)
    except KeyboardInterrupt:
        logging.info("Stopping dashboard")
        return 0
    finally:
        dashboard.close()


if __name__ == "__main__":
    sys.exit(main())

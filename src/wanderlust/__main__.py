"""
Main entry point for the trip planning application.
"""

import argparse
import logging
import sys
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .config.settings import STORAGE_DIR, validate_api_keys
from .core.agent import TravelPlanner
from .core.nodes import DEFAULT_CURRENCY, parse_trip_plan
from .core.state import DEFAULT_FORM_DATA, TripPlan
from .core.store import TripStore
from .utils.itinerary import segment_days
from .utils.storage import FileKeyValueStorage, TripStoreError
from .utils.tools import fetch_offline_map


def display_readable_plan(plan: TripPlan) -> None:
    """Prints the plan in a user-friendly format."""
    segments = segment_days(plan.get("itinerary", ""))

    print("\n--- Itinerary ---")
    if segments["preamble"]:
        print(segments["preamble"])
    for day in segments["days"]:
        print(f"\n** {day['title']} **")
        if day["body"]:
            print(day["body"])

    print("\n--- Budget ---")
    for item in plan.get("budget_breakdown", []):
        print(f"- {item['category']}: {item['amount']} {item['currency']}")

    if plan.get("recommended_hotels"):
        print("\n--- Hotels ---")
        for hotel in plan["recommended_hotels"]:
            print(f"- {hotel['name']} ({'*' * hotel['stars']}), {hotel['price_per_night']} per night")
            if hotel["location_vibe"]:
                print(f"    Vibe: {hotel['location_vibe']}")

    if plan.get("weather_forecast"):
        print("\n--- Weather ---")
        for day in plan["weather_forecast"]:
            print(f"- {day['date']}: {day['condition']}, {day['temp_low']} to {day['temp_high']}")

    print("\n--- Packing ---")
    for category in plan.get("packing_list", []):
        print(f"{category['category']}: {', '.join(category['items'])}")

    for title, key in (("Transport", "transport_info"), ("Security", "security_tips"),
                       ("Nightlife", "nightlife"), ("Dos and Don'ts", "dos_and_donts")):
        if plan.get(key):
            print(f"\n--- {title} ---")
            print(plan[key])

    if plan.get("grounding_references"):
        print("\n--- Sources ---")
        for ref in plan["grounding_references"]:
            if ref.get("uri"):
                print(f"- {ref.get('title') or ref['uri']}: {ref['uri']}")


def _format_timestamp(ms: Optional[int]) -> str:
    if not ms:
        return "unknown"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wanderlust", description="AI travel plans from the command line.")
    parser.add_argument("--storage-dir", default=STORAGE_DIR, help="Directory holding saved trips.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Generate a new travel plan.")
    plan.add_argument("destination")
    plan.add_argument("--days", type=int, default=DEFAULT_FORM_DATA["duration"])
    plan.add_argument("--date", default=date.today().isoformat(), help="Travel date, YYYY-MM-DD.")
    plan.add_argument("--travelers", default=DEFAULT_FORM_DATA["travelers"])
    plan.add_argument("--budget", default=DEFAULT_FORM_DATA["budget"])
    plan.add_argument("--currency", default=DEFAULT_FORM_DATA["currency"])
    plan.add_argument("--hotel", default=DEFAULT_FORM_DATA["hotel_preferences"], help="Accommodation preferences.")
    plan.add_argument("--transport", default=DEFAULT_FORM_DATA["transport_mode"])
    plan.add_argument("--interest", action="append", dest="interests", help="Repeat for several interests.")
    plan.add_argument("--notes", default="")
    plan.add_argument("--save", action="store_true", help="Save the plan once generated.")
    plan.add_argument("--offline-map", action="store_true", help="Attach a static map when saving.")

    parse = subparsers.add_parser("parse", help="Decode a raw model response saved to a file.")
    parse.add_argument("file")
    parse.add_argument("--currency", default=DEFAULT_CURRENCY)

    trips = subparsers.add_parser("trips", help="Manage saved trips.")
    trips_sub = trips.add_subparsers(dest="trips_command", required=True)
    trips_sub.add_parser("list", help="List saved trips, newest first.")
    show = trips_sub.add_parser("show", help="Print a saved trip.")
    show.add_argument("trip_id")
    delete = trips_sub.add_parser("delete", help="Delete a saved trip.")
    delete.add_argument("trip_id")

    return parser


def _run_plan(planner: TravelPlanner, args: argparse.Namespace) -> int:
    if not validate_api_keys():
        print("\nError: Missing GEMINI_API_KEY. Please set it in your environment.")
        return 1

    form_data: Dict[str, Any] = dict(DEFAULT_FORM_DATA)
    form_data.update({
        "destination": args.destination,
        "duration": args.days,
        "travel_date": args.date,
        "travelers": args.travelers,
        "budget": args.budget,
        "currency": args.currency,
        "hotel_preferences": args.hotel,
        "transport_mode": args.transport,
        "interests": args.interests or DEFAULT_FORM_DATA["interests"],
        "notes": args.notes,
    })

    print("WanderLust is crafting your journey...")
    plan = planner.generate_plan(form_data)
    if plan is None:
        print(f"\nSorry, the plan could not be generated: {planner.error_message}")
        return 1

    display_readable_plan(plan)

    if args.save:
        asset = fetch_offline_map(args.destination) if args.offline_map else None
        saved = planner.save_active_trip(offline_map_asset=asset)
        print(f"\n{planner.notice}")
        if not saved:
            return 1
    return 0


def _run_trips(planner: TravelPlanner, args: argparse.Namespace) -> int:
    if args.trips_command == "list":
        trips: List[Dict[str, Any]] = planner.show_saved_trips()
        if not trips:
            print("No saved trips yet.")
        for trip in trips:
            has_map = " [map]" if trip.get("offline_map_asset") else ""
            print(f"{trip['id']}  {trip.get('destination', '')}  {trip.get('travel_date_key', '')}  saved {_format_timestamp(trip.get('timestamp'))}{has_map}")
        return 0

    if args.trips_command == "show":
        record = planner.open_saved_trip(args.trip_id)
        if record is None:
            print(f"No saved trip with id {args.trip_id}.")
            return 1
        print(f"{record.get('destination', '')} ({record.get('travel_date_key', '')})")
        display_readable_plan(record["plan"])
        return 0

    before = len(planner.saved_trips)
    remaining = planner.delete_trip(args.trip_id)
    if len(remaining) == before:
        print(f"No saved trip with id {args.trip_id}.")
        return 1
    print(f"Deleted {args.trip_id}.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the trip planning application."""
    args = _build_parser().parse_args(argv)

    if args.command == "parse":
        with open(args.file, "r", encoding="utf-8") as f:
            raw_text = f.read()
        display_readable_plan(parse_trip_plan({"text": raw_text, "grounding_references": []}, args.currency))
        return 0

    planner = TravelPlanner(TripStore(FileKeyValueStorage(args.storage_dir)))
    try:
        planner.load_saved_trips()
    except TripStoreError as e:
        logging.error(f"Could not load saved trips: {e}")
        print(f"\nError: saved trips could not be read: {e}")
        return 1

    try:
        if args.command == "plan":
            return _run_plan(planner, args)
        return _run_trips(planner, args)
    except KeyboardInterrupt:
        planner.cancel_request()
        print("\nCancelled. Safe travels!")
        return 130


if __name__ == "__main__":
    sys.exit(main())

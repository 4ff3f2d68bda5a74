# Main script to estimate delivery distances and fees from the hub to every district.

import argparse
import json
import os
import sys
import traceback

from api_adapters import (
    DistrictGeocoder,
    FixedIntervalRateLimiter,
    NominatimAdapter,
    RateLimiter,
)
from api_structures import DistanceResult, DistrictEntry
from delivery_config import DELIVERY_ZONES, CalculatorSettings, flatten_zones, load_settings
from distance_calculator import resolve_fee, road_distance_km


# --- Core Logic ---

def calculate_distances(
    districts: list[DistrictEntry],
    geocoder: DistrictGeocoder,
    settings: CalculatorSettings,
    rate_limiter: RateLimiter
) -> tuple[dict[str, DistanceResult], list[str]]:
    """
    Geocodes each district in order and prices it by road distance from the hub.

    Returns the report (district name -> result, in input order) and the names
    that could not be geocoded. The rate limiter is waited on after every
    lookup, whether it succeeded or not.
    """
    results = {}
    failed = []
    total = len(districts)

    for i, district in enumerate(districts, start=1):
        # Printed after the lookup so adapter messages stay on their own lines.
        coords = geocoder.locate(district.name)
        if coords is None:
            print(f"[{i}/{total}] {district.name}... FAILED")
            failed.append(district.name)
            results[district.name] = DistanceResult(km=None, fee=district.base_fee)
        else:
            km = road_distance_km(settings.hub, coords, settings.road_factor)
            results[district.name] = DistanceResult(
                km=km, fee=resolve_fee(km, district.base_fee))
            print(f"[{i}/{total}] {district.name}... {km} km")
        rate_limiter.wait()

    return results, failed


def write_report(results: dict[str, DistanceResult], output_path: str):
    """Writes the report as pretty-printed JSON."""
    folder = os.path.dirname(output_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    payload = {name: result.to_dict() for name, result in results.items()}
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False, allow_nan=False)


def run(settings: CalculatorSettings, verbose: bool = False) -> int:
    districts = flatten_zones(DELIVERY_ZONES)
    adapter = NominatimAdapter(
        user_agent=settings.user_agent,
        viewbox=settings.viewbox,
        timeout=settings.request_timeout_sec,
        verbose=verbose)
    geocoder = DistrictGeocoder(
        adapter, settings.manual_coords, settings.fallback_queries)
    rate_limiter = FixedIntervalRateLimiter(settings.request_delay_sec)

    print(f"Measuring {len(districts)} districts from the hub at "
          f"{settings.hub.lat}, {settings.hub.lon}.\n")
    results, failed = calculate_distances(
        districts, geocoder, settings, rate_limiter)

    if failed:
        print("\nFailed to geocode:", ", ".join(failed))

    write_report(results, settings.output_path)
    print(f"\nWritten to {settings.output_path}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Delivery Distance Calculator: estimate road distance and fee for every district.")
    parser.add_argument('-o', '--output',
                        help="Where to write the JSON report (default: distances-output.json).")
    parser.add_argument('--delay', type=float,
                        help="Seconds to pause between geocoding requests.")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose mode to see the exact queries being sent.")
    args = parser.parse_args(argv)
    if args.delay is not None and args.delay < 0:
        parser.error("--delay must not be negative")

    try:
        settings = load_settings(
            output_path=args.output, request_delay_sec=args.delay)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        return run(settings, verbose=args.verbose)
    except Exception:
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())

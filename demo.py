"""
Orbit Tracker Demonstration

This script demonstrates the key capabilities of the orbit tracker:
- TLE parsing and checksum validation
- Two-body + J2 propagation (or SGP4 with --model sgp4)
- ECI to geodetic conversion
- Ground track sampling
- Overhead checks and next-pass prediction for an observer

Usage:
    python demo.py [--model j2|sgp4] [--lat LAT --lon LON] [--plot FILE] [--verbose]

Arguments:
    --model: Propagation model (default: j2)
    --lat, --lon: Observer location in degrees (default: New Delhi)
    --time: ISO-8601 UTC instant to evaluate (default: sample catalog epoch)
    --plot: Write a ground track plot of the catalog to FILE (PNG)
    --verbose: Enable debug logging
"""

import argparse
import logging
from datetime import datetime, timezone
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from config import TrackerConfig
from logging_config import configure_logging, get_logger
from orbit_tracker.models import ObserverLocation
from orbit_tracker.propagator import get_propagation_model
from orbit_tracker.tracker import SatelliteTracker, TrackedSatellite

logger = get_logger(__name__)

SAMPLE_EPOCH = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def print_snapshot(snapshots: List[TrackedSatellite], now: datetime) -> None:
    """Print one line per satellite."""
    print(f"\nSatellite status at {now.isoformat()}")
    print("=" * 78)
    print(f"{'NAME':<14} {'NORAD':>6} {'LAT':>8} {'LON':>9} {'ALT km':>8} {'km/s':>6}  {'STATUS':<8} NEXT")

    for sat in snapshots:
        if sat.position is None:
            print(f"{sat.name:<14} {sat.norad_id:>6}  no data")
            continue

        pos = sat.position
        print(
            f"{sat.name:<14} {sat.norad_id:>6} {pos.latitude:8.3f} {pos.longitude:9.3f} "
            f"{pos.altitude:8.1f} {pos.velocity:6.3f}  {sat.status:<8} {sat.next_pass}"
        )


def plot_ground_tracks(snapshots: List[TrackedSatellite], observer: ObserverLocation,
                       output_file: str) -> None:
    """
    Plot ground tracks on a longitude/latitude grid.

    Parameters
    ----------
    snapshots : list of TrackedSatellite
        Snapshots with ground tracks
    observer : ObserverLocation
        Observer to mark on the plot
    output_file : str
        PNG output path
    """
    fig, ax = plt.subplots(figsize=(12, 6))

    for sat in snapshots:
        if not sat.ground_track:
            continue
        lons = [p.longitude for p in sat.ground_track]
        lats = [p.latitude for p in sat.ground_track]
        ax.scatter(lons, lats, s=4, label=sat.name)
        if sat.position is not None:
            ax.plot(sat.position.longitude, sat.position.latitude, "k^", markersize=6)

    ax.plot(observer.longitude, observer.latitude, "r*", markersize=12, label="Observer")
    ax.set_xlim(-180, 180)
    ax.set_ylim(-90, 90)
    ax.set_xlabel("Longitude (deg)")
    ax.set_ylabel("Latitude (deg)")
    ax.set_title("Ground tracks")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="lower left", fontsize=8)

    fig.tight_layout()
    fig.savefig(output_file, dpi=120)
    plt.close(fig)
    logger.info(f"Ground track plot written to {output_file}")


def main(argv: Optional[List[str]] = None) -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(description="Orbit Tracker Demonstration")
    parser.add_argument("--model", default=TrackerConfig.PROPAGATION_MODEL, help="Propagation model: j2 or sgp4")
    parser.add_argument("--lat", type=float, default=TrackerConfig.OBSERVER_LAT, help="Observer latitude (deg)")
    parser.add_argument("--lon", type=float, default=TrackerConfig.OBSERVER_LON, help="Observer longitude (deg)")
    parser.add_argument("--time", help="ISO-8601 UTC instant (default: sample epoch)")
    parser.add_argument("--plot", metavar="FILE", help="Write ground track plot to FILE")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    now = SAMPLE_EPOCH
    if args.time:
        now = datetime.fromisoformat(args.time.replace("Z", "+00:00"))
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

    observer = ObserverLocation(args.lat, args.lon)
    tracker = SatelliteTracker(observer=observer, model=get_propagation_model(args.model))
    tracker.load_sample_catalog()

    logger.info(f"Loaded {len(tracker.satellites)} satellites, model {tracker.model.name}")

    snapshots = tracker.snapshot(now, include_ground_track=bool(args.plot))
    print_snapshot(snapshots, now)

    if args.plot:
        plot_ground_tracks(snapshots, observer, args.plot)


if __name__ == "__main__":
    main()

"""
Tests for the satellite tracker facade

Run with:
    python -m pytest tests/test_tracker.py -v
"""

import unittest
from datetime import datetime, timedelta, timezone

from config import SATELLITE_TLES
from orbit_tracker.errors import InvalidParameters, MalformedRecord, PropagationDivergence
from orbit_tracker.models import ObserverLocation
from orbit_tracker.propagator import PropagationModel, SimplifiedJ2Model
from orbit_tracker.tracker import SatelliteTracker, format_countdown
from tests.fixtures import (
    ISS_LINE1,
    ISS_LINE2,
    RESOURCESAT_EPOCH,
    RESOURCESAT_LINE1,
    RESOURCESAT_LINE2,
    SAMPLE_CATALOG,
)


class FailingModel(PropagationModel):
    """Model that always diverges."""

    name = "failing"

    def propagate(self, elements, at):
        raise PropagationDivergence(f"diverged for {elements.norad_id}")


class TestFormatCountdown(unittest.TestCase):
    """Test next-pass countdown labels"""

    def setUp(self):
        self.now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def test_minutes(self):
        self.assertEqual(format_countdown(self.now, self.now + timedelta(minutes=42, seconds=30)), "42m")

    def test_hours_and_minutes(self):
        self.assertEqual(format_countdown(self.now, self.now + timedelta(minutes=185)), "3h 5m")

    def test_clock_time_beyond_a_day(self):
        start = datetime(2024, 1, 16, 14, 30, tzinfo=timezone.utc)
        self.assertEqual(format_countdown(self.now, start), "14:30 UTC")

    def test_past_start(self):
        self.assertEqual(format_countdown(self.now, self.now - timedelta(minutes=5)), "0m")


class TestCatalog(unittest.TestCase):
    """Test loading element sets"""

    def test_sample_catalog(self):
        tracker = SatelliteTracker()
        loaded = tracker.load_sample_catalog()

        self.assertEqual(len(loaded), len(SATELLITE_TLES))
        self.assertEqual(set(tracker.satellites), {e["norad_id"] for e in SATELLITE_TLES.values()})
        for entry in SATELLITE_TLES.values():
            self.assertEqual(tracker.get_elements(entry["norad_id"]).name, entry["name"])

    def test_load_catalog_text(self):
        tracker = SatelliteTracker()
        loaded = tracker.load_catalog(SAMPLE_CATALOG, provider="Celestrak")

        self.assertEqual(sorted(loaded), ["25544", "37387"])
        self.assertEqual(tracker.satellites["25544"]["provider"], "Celestrak")

    def test_bad_checksum_rejected(self):
        tracker = SatelliteTracker()

        with self.assertRaises(MalformedRecord):
            tracker.load_satellite(RESOURCESAT_LINE1[:-1] + "0", RESOURCESAT_LINE2)
        self.assertEqual(tracker.satellites, {})

    def test_unknown_satellite(self):
        tracker = SatelliteTracker()

        with self.assertRaises(ValueError):
            tracker.position("99999", RESOURCESAT_EPOCH)

    def test_model_from_name(self):
        tracker = SatelliteTracker()
        self.assertIn(tracker.model.name, ("j2", "sgp4"))


class TestPositions(unittest.TestCase):
    """Test position queries and caching"""

    def setUp(self):
        self.tracker = SatelliteTracker(model=SimplifiedJ2Model())
        self.norad_id = self.tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2, "RESOURCESAT-2")

    def test_position(self):
        position = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH)

        self.assertIsNotNone(position)
        self.assertGreater(position.altitude, 750.0)
        self.assertLess(position.altitude, 900.0)
        self.assertEqual(position.timestamp, RESOURCESAT_EPOCH)

    def test_cache_hit_within_same_second(self):
        first = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH)
        second = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH + timedelta(milliseconds=300))

        self.assertIs(first, second)
        self.assertEqual(len(self.tracker.cache), 1)

    def test_cache_keeps_last_result_only(self):
        """Polling many distinct seconds keeps one entry per satellite"""
        iss_id = self.tracker.load_satellite(ISS_LINE1, ISS_LINE2)

        for second in range(2000):
            at = RESOURCESAT_EPOCH + timedelta(seconds=second)
            self.tracker.position(self.norad_id, at)
            self.tracker.position(iss_id, at)

        self.assertEqual(len(self.tracker.cache), 2)
        cached_at, cached = self.tracker.cache[self.norad_id]
        self.assertEqual(cached_at, RESOURCESAT_EPOCH + timedelta(seconds=1999))
        self.assertIs(self.tracker.position(self.norad_id, cached_at), cached)

    def test_cache_miss_on_earlier_second(self):
        first = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH)
        self.tracker.position(self.norad_id, RESOURCESAT_EPOCH + timedelta(seconds=5))
        again = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH)

        self.assertIsNot(first, again)
        self.assertEqual(first, again)

    def test_reload_invalidates_cache(self):
        first = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH)
        self.tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2, "RESOURCESAT-2")
        second = self.tracker.position(self.norad_id, RESOURCESAT_EPOCH)

        self.assertIsNot(first, second)
        self.assertEqual(first, second)

    def test_cache_disabled(self):
        tracker = SatelliteTracker(model=SimplifiedJ2Model(), cache_positions=False)
        norad_id = tracker.load_satellite(ISS_LINE1, ISS_LINE2)
        at = datetime(2023, 9, 16, 14, 0, 0, 250000, tzinfo=timezone.utc)

        position = tracker.position(norad_id, at)

        self.assertEqual(position.timestamp, at)
        self.assertEqual(tracker.cache, {})

    def test_failed_propagation_returns_none(self):
        tracker = SatelliteTracker(model=FailingModel())
        norad_id = tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2)

        self.assertIsNone(tracker.position(norad_id, RESOURCESAT_EPOCH))
        self.assertEqual(tracker.ground_track(norad_id, RESOURCESAT_EPOCH), [])
        self.assertIsNone(tracker.next_pass(norad_id, RESOURCESAT_EPOCH))
        self.assertFalse(tracker.is_overhead(norad_id, RESOURCESAT_EPOCH))
        self.assertEqual(tracker.cache, {})

        history = tracker.get_error_history(norad_id)
        self.assertEqual(len(history), 4)
        self.assertEqual(history[0]["error_type"], "PropagationDivergence")

    def test_error_history_is_bounded(self):
        tracker = SatelliteTracker(model=FailingModel())
        norad_id = tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2)

        for minute in range(120):
            tracker.position(norad_id, RESOURCESAT_EPOCH + timedelta(minutes=minute))

        self.assertEqual(len(tracker.get_error_history(norad_id)), 100)

    def test_invalid_ground_track_parameters_raise(self):
        with self.assertRaises(InvalidParameters):
            self.tracker.ground_track(self.norad_id, RESOURCESAT_EPOCH, 120, 0)

    def test_ground_track(self):
        track = self.tracker.ground_track(self.norad_id, RESOURCESAT_EPOCH, 120, 2)
        self.assertEqual(len(track), 61)

    def test_osculating_elements(self):
        osc = self.tracker.osculating_elements(self.norad_id, RESOURCESAT_EPOCH)

        self.assertAlmostEqual(osc["inclination_deg"], 98.75, places=4)
        self.assertAlmostEqual(osc["raan_deg"], 80.0, places=4)
        self.assertLess(osc["eccentricity"], 0.001)


class TestSnapshot(unittest.TestCase):
    """Test display snapshots"""

    def test_observer_under_satellite(self):
        probe = SatelliteTracker(model=SimplifiedJ2Model())
        norad_id = probe.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2, "RESOURCESAT-2")
        subpoint = probe.position(norad_id, RESOURCESAT_EPOCH)

        observer = ObserverLocation(subpoint.latitude, subpoint.longitude)
        tracker = SatelliteTracker(observer=observer, model=SimplifiedJ2Model())
        tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2, "RESOURCESAT-2", provider="ISRO")

        self.assertTrue(tracker.is_overhead(norad_id, RESOURCESAT_EPOCH))

        snapshot = tracker.snapshot(RESOURCESAT_EPOCH, include_ground_track=False)
        self.assertEqual(len(snapshot), 1)
        self.assertEqual(snapshot[0].status, "passing")
        self.assertEqual(snapshot[0].next_pass, "NOW")
        self.assertEqual(snapshot[0].provider, "ISRO")
        self.assertEqual(snapshot[0].ground_track, [])

    def test_snapshot_with_next_pass(self):
        tracker = SatelliteTracker(observer=ObserverLocation(28.6139, 77.209), model=SimplifiedJ2Model())
        tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2, "RESOURCESAT-2")

        snapshot = tracker.snapshot(RESOURCESAT_EPOCH, include_ground_track=True)[0]

        self.assertIn(snapshot.status, ("passing", "horizon", "active"))
        self.assertEqual(len(snapshot.ground_track), 61)
        if snapshot.status != "passing":
            self.assertIsNotNone(snapshot.pass_prediction)
            self.assertEqual(
                snapshot.next_pass,
                format_countdown(RESOURCESAT_EPOCH, snapshot.pass_prediction.start),
            )

        as_dict = snapshot.to_dict()
        self.assertEqual(as_dict["norad_id"], "37387")
        self.assertIn("altitude_km", as_dict["position"])

    def test_snapshot_without_data(self):
        tracker = SatelliteTracker(model=FailingModel())
        tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2)

        snapshot = tracker.snapshot(RESOURCESAT_EPOCH)[0]

        self.assertIsNone(snapshot.position)
        self.assertEqual(snapshot.status, "active")
        self.assertEqual(snapshot.next_pass, "--:--")


if __name__ == "__main__":
    unittest.main()

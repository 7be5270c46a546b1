"""
Tests for the JSON query API

Run with:
    python -m pytest tests/test_api.py -v
"""

import unittest

from orbit_tracker.api import create_app
from orbit_tracker.models import ObserverLocation
from orbit_tracker.propagator import SimplifiedJ2Model
from orbit_tracker.tracker import SatelliteTracker
from tests.fixtures import RESOURCESAT_LINE1, RESOURCESAT_LINE2
from tests.test_tracker import FailingModel

EPOCH = "2024-01-15T12:00:00Z"


class TestAPI(unittest.TestCase):
    """Test API endpoints with the Flask test client"""

    def setUp(self):
        self.tracker = SatelliteTracker(
            observer=ObserverLocation(28.6139, 77.209),
            model=SimplifiedJ2Model(),
        )
        self.tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2, "RESOURCESAT-2", provider="ISRO")
        self.client = create_app(self.tracker).test_client()

    def test_health(self):
        response = self.client.get("/health")
        data = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["satellites_loaded"], 1)
        self.assertEqual(data["propagation_model"], "j2")

    def test_list_satellites(self):
        data = self.client.get("/satellites").get_json()

        self.assertEqual(data["count"], 1)
        self.assertEqual(data["satellites"][0]["norad_id"], "37387")
        self.assertEqual(data["satellites"][0]["provider"], "ISRO")

    def test_position(self):
        response = self.client.get(f"/satellites/37387/position?timestamp={EPOCH}")
        position = response.get_json()["position"]

        self.assertEqual(response.status_code, 200)
        self.assertGreater(position["altitude_km"], 750.0)
        self.assertLess(position["altitude_km"], 900.0)
        self.assertTrue(position["timestamp"].startswith("2024-01-15T12:00:00"))

    def test_position_unknown_satellite(self):
        response = self.client.get("/satellites/99999/position")
        self.assertEqual(response.status_code, 404)

    def test_position_without_data(self):
        tracker = SatelliteTracker(model=FailingModel())
        tracker.load_satellite(RESOURCESAT_LINE1, RESOURCESAT_LINE2)
        client = create_app(tracker).test_client()

        response = client.get(f"/satellites/37387/position?timestamp={EPOCH}")

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.get_json()["position"])

    def test_invalid_timestamp(self):
        response = self.client.get("/satellites/37387/position?timestamp=yesterday")
        self.assertEqual(response.status_code, 400)

    def test_ground_track(self):
        response = self.client.get(f"/satellites/37387/ground-track?timestamp={EPOCH}&window=60&step=5")
        data = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["count"], 13)
        self.assertEqual(len(data["ground_track"]), 13)

    def test_ground_track_invalid_step(self):
        response = self.client.get(f"/satellites/37387/ground-track?timestamp={EPOCH}&step=0")
        self.assertEqual(response.status_code, 400)

        response = self.client.get(f"/satellites/37387/ground-track?timestamp={EPOCH}&step=abc")
        self.assertEqual(response.status_code, 400)

    def test_next_pass(self):
        data = self.client.get(f"/satellites/37387/next-pass?timestamp={EPOCH}").get_json()

        self.assertEqual(data["min_elevation_deg"], self.tracker.min_elevation_deg)
        self.assertIsNotNone(data["next_pass"])
        self.assertGreaterEqual(data["next_pass"]["max_elevation_deg"], self.tracker.min_elevation_deg)
        self.assertIn("countdown", data["next_pass"])

    def test_next_pass_unreachable_threshold(self):
        data = self.client.get(f"/satellites/37387/next-pass?timestamp={EPOCH}&min_elevation=91").get_json()
        self.assertIsNone(data["next_pass"])

    def test_overhead(self):
        data = self.client.get(f"/satellites/37387/overhead?timestamp={EPOCH}&swath=40100").get_json()

        # Half of a swath wider than the circumference covers the globe
        self.assertTrue(data["overhead"])
        self.assertEqual(data["swath_width_km"], 40100.0)

    def test_snapshot(self):
        data = self.client.get(f"/snapshot?timestamp={EPOCH}&ground_track=false").get_json()

        self.assertEqual(data["count"], 1)
        satellite = data["satellites"][0]
        self.assertEqual(satellite["name"], "RESOURCESAT-2")
        self.assertEqual(satellite["ground_track"], [])
        self.assertIn(satellite["status"], ("passing", "horizon", "active"))
        self.assertIsNotNone(satellite["position"])


if __name__ == "__main__":
    unittest.main()

"""Shared TLE fixtures for the test suite."""

from datetime import datetime, timezone

# RESOURCESAT-2, sun-synchronous LEO
RESOURCESAT_LINE1 = "1 37387U 11015A   24015.50000000  .00000100  00000-0  10000-3 0  9998"
RESOURCESAT_LINE2 = "2 37387  98.7500  80.0000 0001000  90.0000 270.0000 14.21500000100000"
RESOURCESAT_EPOCH = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

# ISS (ZARYA)
ISS_LINE1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
ISS_LINE2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"
ISS_NAME = "ISS (ZARYA)"

SAMPLE_CATALOG = f"""RESOURCESAT-2
{RESOURCESAT_LINE1}
{RESOURCESAT_LINE2}
{ISS_NAME}
{ISS_LINE1}
{ISS_LINE2}
"""

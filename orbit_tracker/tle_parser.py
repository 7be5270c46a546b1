"""
TLE Parser Module

Provides utilities for parsing Two-Line Element (TLE) sets into typed
orbital elements, validating their checksums, and reconstructing TLE lines
from parsed elements.

Field layout follows the NORAD 69-column format:

Line 1::

    1 NNNNNC NNNNNAAA NNNNN.NNNNNNNN +.NNNNNNNN +NNNNN-N +NNNNN-N N NNNNN

Line 2::

    2 NNNNN NNN.NNNN NNN.NNNN NNNNNNN NNN.NNNN NNN.NNNN NN.NNNNNNNNNNNNNN

References:
    Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
"""

import logging
import math
from datetime import datetime, timezone, timedelta
from typing import Dict, Tuple

from orbit_tracker.errors import MalformedRecord
from orbit_tracker.models import TLEElement

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69


def tle_checksum(line: str) -> int:
    """
    Compute the mod-10 checksum of a TLE line.

    Digits count their value, minus signs count 1, everything else 0.
    Only the first 68 columns participate.
    """
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def epoch_to_datetime(epoch_year: int, epoch_days: float) -> datetime:
    """
    Convert a TLE epoch to a UTC datetime.

    Args:
        epoch_year: Two-digit year (< 57 maps to 20xx, otherwise 19xx)
        epoch_days: Day of year with fractional part (1.0 is Jan 1 00:00)

    Returns:
        Timezone-aware datetime in UTC
    """
    year = 1900 + epoch_year if epoch_year >= 57 else 2000 + epoch_year
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=epoch_days - 1.0)


def _validate_line(line: str, line_number: int) -> str:
    line = line.rstrip()
    if len(line) != TLE_LINE_LENGTH:
        raise MalformedRecord(
            f"Line {line_number} has {len(line)} columns, expected {TLE_LINE_LENGTH}"
        )
    if line[0] != str(line_number):
        raise MalformedRecord(f"Line {line_number} must start with '{line_number}', got '{line[0]}'")

    if not line[68].isdigit():
        raise MalformedRecord(f"Line {line_number} checksum column is not a digit")
    expected = tle_checksum(line)
    if int(line[68]) != expected:
        raise MalformedRecord(
            f"Line {line_number} checksum mismatch: found {line[68]}, computed {expected}"
        )
    return line


def _field_float(line: str, start: int, end: int, label: str) -> float:
    text = line[start:end].strip()
    try:
        return float(text)
    except ValueError:
        raise MalformedRecord(f"Field '{label}' is not numeric: {line[start:end]!r}")


def _field_int(line: str, start: int, end: int, label: str, default: int = None) -> int:
    text = line[start:end].strip()
    if not text and default is not None:
        return default
    try:
        return int(text)
    except ValueError:
        raise MalformedRecord(f"Field '{label}' is not an integer: {line[start:end]!r}")


def _field_exponent(field: str, label: str) -> float:
    """Decode TLE implied-decimal exponent notation, e.g. ' 21844-3' -> 0.21844e-3."""
    if not field.strip():
        return 0.0

    mantissa = field[:-2].strip()
    exponent = field[-2:].strip()

    sign = 1.0
    if mantissa.startswith("-"):
        sign = -1.0
        mantissa = mantissa[1:]
    elif mantissa.startswith("+"):
        mantissa = mantissa[1:]

    if not mantissa.isdigit():
        raise MalformedRecord(f"Field '{label}' is not numeric: {field!r}")
    try:
        power = int(exponent) if exponent else 0
    except ValueError:
        raise MalformedRecord(f"Field '{label}' has an invalid exponent: {field!r}")

    return sign * float("0." + mantissa) * (10.0 ** power)


def parse_tle(line1: str, line2: str, name: str = "") -> TLEElement:
    """
    Parse TLE lines into orbital elements.

    Args:
        line1: First line of TLE
        line2: Second line of TLE
        name: Optional satellite name

    Returns:
        TLEElement with the decoded fields

    Raises:
        MalformedRecord: bad layout, checksum or non-numeric field
    """
    line1 = _validate_line(line1, 1)
    line2 = _validate_line(line2, 2)

    norad_id = line1[2:7].strip()
    if norad_id != line2[2:7].strip():
        raise MalformedRecord(
            f"Catalog number mismatch between lines: {norad_id!r} vs {line2[2:7].strip()!r}"
        )
    if not norad_id:
        raise MalformedRecord("Missing catalog number")

    epoch_year = _field_int(line1, 18, 20, "epoch year")
    epoch_days = _field_float(line1, 20, 32, "epoch day")

    # Eccentricity has an implied leading decimal point
    ecc_field = line2[26:33].strip()
    if not ecc_field.isdigit():
        raise MalformedRecord(f"Field 'eccentricity' is not numeric: {line2[26:33]!r}")

    element = TLEElement(
        norad_id=norad_id,
        name=name.strip() or norad_id,
        classification=line1[7].strip() or "U",
        international_designator=line1[9:17].strip(),
        epoch=epoch_to_datetime(epoch_year, epoch_days),
        ndot=_field_float(line1, 33, 43, "ndot"),
        nddot=_field_exponent(line1[44:52], "nddot"),
        bstar=_field_exponent(line1[53:61], "bstar"),
        element_number=_field_int(line1, 64, 68, "element number", default=0),
        inclination_deg=_field_float(line2, 8, 16, "inclination"),
        raan_deg=_field_float(line2, 17, 25, "raan"),
        eccentricity=float("0." + ecc_field),
        arg_perigee_deg=_field_float(line2, 34, 42, "argument of perigee"),
        mean_anomaly_deg=_field_float(line2, 43, 51, "mean anomaly"),
        mean_motion_rev_per_day=_field_float(line2, 52, 63, "mean motion"),
        revolution_number=_field_int(line2, 63, 68, "revolution number", default=0),
        line1=line1,
        line2=line2,
    )

    logger.debug(f"Parsed TLE for {element.name} ({norad_id}), epoch {element.epoch.isoformat()}")
    return element


def parse_tle_catalog(text: str) -> Dict[str, TLEElement]:
    """
    Parse a block of TLE text into elements keyed by satellite name.

    Accepts the three-line format (name line followed by the two element
    lines) and bare two-line records, which are keyed by catalog number.
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    catalog = {}

    i = 0
    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            element = parse_tle(lines[i], lines[i + 1])
            i += 2
        elif i + 2 < len(lines):
            name = lines[i]
            if name.startswith("0 "):
                name = name[2:]
            element = parse_tle(lines[i + 1], lines[i + 2], name)
            i += 3
        else:
            raise MalformedRecord(f"Incomplete TLE record at line {i + 1}")

        catalog[element.name] = element

    return catalog


def _format_exponential(value: float) -> str:
    """Format a number in TLE implied-decimal exponent notation (8 columns)."""
    if value == 0.0:
        return " 00000-0"

    sign = "-" if value < 0 else " "
    abs_val = abs(value)

    exp = int(math.floor(math.log10(abs_val))) + 1
    digits = int(round(abs_val / (10.0 ** exp) * 100000))
    if digits >= 100000:
        digits //= 10
        exp += 1

    exp_sign = "-" if exp < 0 else "+"
    return f"{sign}{digits:05d}{exp_sign}{abs(exp):d}"


def _format_ndot(value: float) -> str:
    sign = "-" if value < 0 else " "
    return sign + f"{abs(value):.8f}"[1:]


def element_to_lines(element: TLEElement) -> Tuple[str, str]:
    """
    Reconstruct TLE lines from parsed elements, with fresh checksums.

    Args:
        element: Parsed elements

    Returns:
        Tuple of (line1, line2) strings
    """
    epoch = element.epoch.astimezone(timezone.utc)
    start_of_year = datetime(epoch.year, 1, 1, tzinfo=timezone.utc)
    epoch_days = (epoch - start_of_year).total_seconds() / 86400.0 + 1.0

    line1 = f"1 {element.norad_id:>5}{element.classification} "
    line1 += f"{element.international_designator:<8} "
    line1 += f"{epoch.year % 100:02d}{epoch_days:012.8f} "
    line1 += _format_ndot(element.ndot) + " "
    line1 += _format_exponential(element.nddot) + " "
    line1 += _format_exponential(element.bstar)
    line1 += f" 0 {element.element_number:>4d}"
    line1 += str(tle_checksum(line1))

    ecc_str = f"{int(round(element.eccentricity * 10000000)):07d}"
    line2 = f"2 {element.norad_id:>5} "
    line2 += f"{element.inclination_deg:8.4f} "
    line2 += f"{element.raan_deg:8.4f} "
    line2 += ecc_str + " "
    line2 += f"{element.arg_perigee_deg:8.4f} "
    line2 += f"{element.mean_anomaly_deg:8.4f} "
    line2 += f"{element.mean_motion_rev_per_day:11.8f}"
    line2 += f"{element.revolution_number % 100000:>5d}"
    line2 += str(tle_checksum(line2))

    return line1, line2

"""Planar helpers over (latitude, longitude) pairs expressed in degrees.

Degrees are treated as Euclidean coordinates; no great-circle maths.
"""

import math
from typing import Tuple

LatLon = Tuple[float, float]


def planar_distance(a: LatLon, b: LatLon) -> float:
	"""Euclidean distance between two points, in degrees."""
	return math.hypot(b[0] - a[0], b[1] - a[1])


def bearing(a: LatLon, b: LatLon) -> float:
	"""Heading from a to b in degrees, 0 = north, 90 = east, range [0, 360)."""
	d_lat = b[0] - a[0]
	d_lon = b[1] - a[1]
	if d_lat == 0 and d_lon == 0:
		return 0.0
	return math.degrees(math.atan2(d_lon, d_lat)) % 360


def approach(a: LatLon, b: LatLon, factor: float) -> LatLon:
	"""Move from a toward b by `factor` of the remaining delta on each axis."""
	return (a[0] + (b[0] - a[0]) * factor, a[1] + (b[1] - a[1]) * factor)

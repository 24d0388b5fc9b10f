from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from fleetops.model.entities import RUNWAY_DEMAND_PHASES, Airport, Flight, FlightPhase


class PriorityScheduler:
	"""Orders the whole fleet into dispatch order.

	Precedence: emergencies, then flights under the low-fuel threshold, then
	descending ``priority + (100 - fuel_level)``. Each rule also orders the
	flights the previous rules left tied. The sort is stable, so equal keys
	keep their incoming order.
	"""

	def __init__(self, low_fuel_threshold: float) -> None:
		self.low_fuel_threshold = low_fuel_threshold

	def sort_key(self, flight: Flight) -> Tuple[int, int, float]:
		emergency = 0 if flight.phase == FlightPhase.EMERGENCY else 1
		low_fuel = 0 if flight.fuel_level < self.low_fuel_threshold else 1
		urgency = flight.priority + (100.0 - flight.fuel_level)
		return (emergency, low_fuel, -urgency)

	def order(self, flights: Iterable[Flight]) -> List[Flight]:
		return sorted(flights, key=self.sort_key)


@dataclass
class RunwayStatus:
	code: str
	total: int
	demand: int
	available: int

	@property
	def oversubscribed(self) -> bool:
		return self.demand > self.total


class RunwayAllocator:
	"""Advisory runway accounting.

	Demand at an airport is the number of LANDING or EMERGENCY flights bound
	for it. Availability is reported, never enforced here: a flight may enter
	LANDING when nothing is free.
	"""

	def landing_demand(self, flights: Iterable[Flight]) -> Counter:
		return Counter(f.arrival_airport for f in flights if f.phase in RUNWAY_DEMAND_PHASES)

	def allocate(self, airports: Dict[str, Airport], flights: Iterable[Flight]) -> Dict[str, RunwayStatus]:
		"""Recompute ``available_runways`` on every airport in place."""
		demand = self.landing_demand(flights)
		status: Dict[str, RunwayStatus] = {}
		for code, airport in airports.items():
			d = demand.get(code, 0)
			airport.available_runways = max(0, airport.total_runways - d)
			status[code] = RunwayStatus(code=code, total=airport.total_runways, demand=d, available=airport.available_runways)
		return status

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Set

import numpy as np

from fleetops.config import Config
from fleetops.errors import ConfigurationError
from fleetops.model.entities import Airport, Flight, FlightPhase
from fleetops.utils.geometry import bearing, planar_distance


Clock = Callable[[], datetime]

GENERATABLE_PHASES = (FlightPhase.LANDED, FlightPhase.TAKEOFF, FlightPhase.CRUISING)

# One planar degree is taken as 60 nautical miles for the ETA estimate.
NM_PER_DEGREE = 60.0


def utc_now() -> datetime:
	return datetime.now(timezone.utc)


def estimate_arrival(origin: Airport | Flight, destination: Airport, speed_kts: float, now: datetime) -> datetime:
	distance_nm = planar_distance(origin.position.as_tuple(), destination.position.as_tuple()) * NM_PER_DEGREE
	return now + timedelta(hours=distance_nm / max(speed_kts, 1.0))


class FlightGenerator:
	"""Builds new flights between random airport pairs of the registry."""

	def __init__(self, config: Config, airports: Dict[str, Airport], rng: Optional[np.random.Generator] = None, clock: Clock = utc_now) -> None:
		if len(airports) < 2:
			raise ConfigurationError(f"Flight generation needs at least 2 airports, registry has {len(airports)}")
		self.config = config
		self.airports = airports
		self.codes = sorted(airports)
		self.rng = rng if rng is not None else np.random.default_rng(config.seed)
		self.clock = clock
		self.issued_ids: Set[str] = set()

	def _new_id(self) -> str:
		# widen the numeric part once the 4-digit space gets crowded
		digits = 4 + len(self.issued_ids) // 9000
		while True:
			candidate = f"FL{int(self.rng.integers(0, 10 ** digits)):0{digits}d}"
			if candidate not in self.issued_ids:
				self.issued_ids.add(candidate)
				return candidate

	def _pick_route(self) -> tuple[str, str]:
		departure = self.codes[int(self.rng.integers(len(self.codes)))]
		arrival = departure
		while arrival == departure:
			arrival = self.codes[int(self.rng.integers(len(self.codes)))]
		return departure, arrival

	def generate(self, phase: FlightPhase = FlightPhase.TAKEOFF) -> Flight:
		if phase not in GENERATABLE_PHASES:
			raise ValueError(f"Cannot generate a flight in phase {phase.value}")
		cfg = self.config
		now = self.clock()
		departure, arrival = self._pick_route()
		origin, destination = self.airports[departure], self.airports[arrival]
		speed = float(self.rng.uniform(*cfg.speed_range_kts))

		if phase == FlightPhase.LANDED:
			altitude, fuel, priority = 0.0, cfg.landed_fuel, 0
		elif phase == FlightPhase.TAKEOFF:
			altitude, fuel, priority = float(self.rng.uniform(*cfg.takeoff_altitude_ft)), cfg.takeoff_fuel, 1
		else:
			altitude = float(self.rng.uniform(*cfg.cruise_altitude_ft))
			fuel = float(self.rng.uniform(*cfg.cruise_fuel_range))
			priority = 1

		return Flight(
			id=self._new_id(),
			position=origin.position,
			altitude=altitude,
			speed=speed,
			phase=phase,
			departure_airport=departure,
			arrival_airport=arrival,
			fuel_level=fuel,
			priority=priority,
			estimated_arrival_time=estimate_arrival(origin, destination, speed, now),
			takeoff_timestamp=now if phase == FlightPhase.TAKEOFF else None,
			heading=bearing(origin.position.as_tuple(), destination.position.as_tuple()),
		)

	def cruise_altitude(self) -> float:
		"""Fresh altitude inside the cruising band."""
		return float(self.rng.uniform(*self.config.cruise_altitude_ft))

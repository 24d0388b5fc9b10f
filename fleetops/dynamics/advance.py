"""
Per-flight state transition for one tick.

``FlightAdvancer.step`` is a pure function of the previous flight state, the
airport registry and the tick time. It returns a new Flight together with the
events the transition produced; publishing them is left to the caller so a
tick can be applied to the whole fleet before anyone observes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fleetops.agents.core import FLIGHT_LOW_FUEL, FLIGHT_STATUS_CHANGED
from fleetops.config import Config
from fleetops.errors import UnknownAirportError
from fleetops.generation.flights import FlightGenerator
from fleetops.model.entities import Airport, Flight, FlightPhase, can_transition
from fleetops.utils.geometry import approach, bearing, planar_distance


@dataclass
class StepResult:
	flight: Flight
	events: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

	def move_to(self, target: FlightPhase) -> None:
		before = self.flight.phase
		if before == target:
			return
		if not can_transition(before, target):
			raise ValueError(f"Illegal phase transition {before.value} -> {target.value} for {self.flight.id}")
		self.flight.phase = target
		self.events.append((FLIGHT_STATUS_CHANGED, {"flight_id": self.flight.id, "from": before.value, "to": target.value}))


class FlightAdvancer:
	def __init__(self, config: Config, generator: FlightGenerator) -> None:
		self.config = config
		self.generator = generator

	def step(self, flight: Flight, airports: Dict[str, Airport], now: datetime, runway_budget: Optional[Dict[str, int]] = None) -> StepResult:
		"""Advance one flight by one tick.

		Args:
			flight: state at the end of the previous tick (not modified)
			airports: registry keyed by code
			now: tick timestamp
			runway_budget: remaining landing admissions per airport for this
				tick; only consulted when runway enforcement is enabled

		Raises:
			UnknownAirportError: arrival airport missing from the registry
		"""
		if flight.phase == FlightPhase.LANDED:
			return StepResult(flight)

		destination = airports.get(flight.arrival_airport)
		if destination is None:
			raise UnknownAirportError(flight.arrival_airport, flight.id)

		cfg = self.config
		result = StepResult(replace(flight))
		nxt = result.flight

		# 1. takeoff timeout
		if nxt.phase == FlightPhase.TAKEOFF and nxt.takeoff_timestamp is not None:
			if (now - nxt.takeoff_timestamp).total_seconds() >= cfg.takeoff_timeout_seconds:
				result.move_to(FlightPhase.CRUISING)
				nxt.altitude = self.generator.cruise_altitude()

		# 2. exponential approach toward the arrival airport
		target = destination.position.as_tuple()
		lat, lon = approach(nxt.position.as_tuple(), target, cfg.approach_factor)
		nxt.position = replace(nxt.position, latitude=lat, longitude=lon)
		nxt.heading = bearing((lat, lon), target)

		# 3. landing check and descent
		distance = planar_distance((lat, lon), target)
		if nxt.phase not in (FlightPhase.EMERGENCY, FlightPhase.LANDED, FlightPhase.LANDING) and distance < cfg.landing_distance_deg:
			result.move_to(self._landing_phase(nxt, runway_budget))
		if nxt.phase == FlightPhase.LANDING:
			nxt.altitude = max(0.0, nxt.altitude - cfg.descent_step_ft)

		# 4. fuel burn
		previous_fuel = nxt.fuel_level
		nxt.fuel_level = max(0.0, min(100.0, previous_fuel - cfg.fuel_burn_per_tick))

		# 5. low-fuel crossing
		if (
			previous_fuel >= cfg.low_fuel_threshold > nxt.fuel_level
			and nxt.phase not in (FlightPhase.EMERGENCY, FlightPhase.LANDED)
		):
			result.events.append((FLIGHT_LOW_FUEL, {"flight_id": nxt.id, "fuel_level": round(nxt.fuel_level, 2)}))

		if cfg.complete_landings and nxt.phase == FlightPhase.LANDING and nxt.altitude <= 0:
			result.move_to(FlightPhase.LANDED)

		return result

	def _landing_phase(self, flight: Flight, runway_budget: Optional[Dict[str, int]]) -> FlightPhase:
		if not self.config.enforce_runway_capacity or runway_budget is None:
			return FlightPhase.LANDING
		remaining = runway_budget.get(flight.arrival_airport, 0)
		if remaining <= 0:
			return FlightPhase.HOLDING
		runway_budget[flight.arrival_airport] = remaining - 1
		return FlightPhase.LANDING

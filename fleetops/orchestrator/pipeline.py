from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Tuple

from fleetops.agents.core import FLIGHT_SKIPPED, Event, EventBus
from fleetops.config import Config
from fleetops.dynamics.advance import FlightAdvancer
from fleetops.errors import UnknownAirportError
from fleetops.model.entities import Airport, Flight
from fleetops.model.state import SimulationState
from fleetops.optimization.schedulers import PriorityScheduler, RunwayAllocator, RunwayStatus
from fleetops.utils.logging import get_logger


logger = get_logger(__name__)


@dataclass
class TickOutput:
	tick: int
	timestamp: datetime
	dispatch_order: List[str]
	runways: Dict[str, RunwayStatus]
	skipped: List[str] = field(default_factory=list)
	events: int = 0
	latency_seconds: float = 0.0


class TickPipeline:
	"""advance -> schedule -> allocate, applied to a SimulationState as one unit."""

	def __init__(self, config: Config, advancer: FlightAdvancer, bus: EventBus) -> None:
		self.config = config
		self.advancer = advancer
		self.bus = bus
		self.scheduler = PriorityScheduler(config.low_fuel_threshold)
		self.allocator = RunwayAllocator()

	def arrange(self, flights: List[Flight], airports: Dict[str, Airport]) -> Tuple[List[Flight], Dict[str, Airport], Dict[str, RunwayStatus]]:
		"""Dispatch order and fresh runway counts for a fleet, without touching the inputs."""
		ordered = self.scheduler.order(flights)
		next_airports = {code: replace(a) for code, a in airports.items()}
		runways = self.allocator.allocate(next_airports, ordered)
		return ordered, next_airports, runways

	@staticmethod
	def _skip(flight: Flight, reason: str, advanced: List[Flight], skipped: List[str], pending: List[Tuple[str, Dict[str, Any]]]) -> None:
		"""Carry a flight over unchanged and announce why."""
		skipped.append(flight.id)
		advanced.append(flight)
		pending.append((FLIGHT_SKIPPED, {"flight_id": flight.id, "reason": reason}))

	def run_once(self, state: SimulationState, now: datetime) -> TickOutput:
		start = time.perf_counter()
		snapshot = list(state.flights)
		runway_budget = None
		if self.config.enforce_runway_capacity:
			runway_budget = {code: a.available_runways for code, a in state.airports.items()}

		advanced: List[Flight] = []
		pending: List[Tuple[str, Dict[str, Any]]] = []
		skipped: List[str] = []
		for flight in snapshot:
			try:
				result = self.advancer.step(flight, state.airports, now, runway_budget)
			except UnknownAirportError as exc:
				logger.warning("Skipping flight %s this tick: %s", flight.id, exc)
				self._skip(flight, str(exc), advanced, skipped, pending)
				continue
			except Exception as exc:  # pylint: disable=broad-exception-caught
				logger.exception("Advancing flight %s failed, skipping it this tick", flight.id)
				self._skip(flight, f"{type(exc).__name__}: {exc}", advanced, skipped, pending)
				continue
			advanced.append(result.flight)
			pending.extend(result.events)

		ordered, airports, runways = self.arrange(advanced, state.airports)

		# publish the whole tick at once
		state.flights = ordered
		state.airports = airports
		state.tick_count += 1

		for event_type, payload in pending:
			self.bus.publish(Event(event_type, payload, now))

		latency = time.perf_counter() - start
		logger.debug("Tick %d | flights=%d | events=%d | skipped=%d | latency=%.4fs", state.tick_count, len(ordered), len(pending), len(skipped), latency)
		return TickOutput(
			tick=state.tick_count,
			timestamp=now,
			dispatch_order=[f.id for f in ordered],
			runways=runways,
			skipped=skipped,
			events=len(pending),
			latency_seconds=latency,
		)

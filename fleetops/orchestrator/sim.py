from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from fleetops.agents.core import FLIGHT_ADDED, Event, EventBus
from fleetops.alerting.alerts import Alert, AlertAgent
from fleetops.config import Config
from fleetops.dynamics.advance import FlightAdvancer
from fleetops.emergency.dispatcher import DispatchResult, EmergencyDispatcher
from fleetops.generation.flights import Clock, utc_now
from fleetops.ingestion.data_sources import DataIngestion
from fleetops.model.entities import Airport, Emergency, Flight, FlightPhase
from fleetops.model.state import SimulationState
from fleetops.orchestrator.clock import ManualClock
from fleetops.orchestrator.pipeline import TickOutput, TickPipeline
from fleetops.utils.logging import get_logger


logger = get_logger(__name__)


class Simulation:
	"""
	The flight-fleet engine.

	Owns the simulation state and serialises every access to it behind one
	re-entrant lock, so external calls (``add_flight``, ``trigger_emergency``)
	never interleave with a tick. Readers get copies.
	"""

	def __init__(self, config: Config, clock: Clock = utc_now, rng: Optional[np.random.Generator] = None) -> None:
		self.config = config
		self.clock = clock
		self.rng = rng if rng is not None else np.random.default_rng(config.seed)
		self.bus = EventBus()
		self.alerter = AlertAgent(config, self.bus)

		data = DataIngestion(config, clock).simulate(self.rng)
		self.generator = data.generator
		self.pipeline = TickPipeline(config, FlightAdvancer(config, self.generator), self.bus)
		self.dispatcher = EmergencyDispatcher(config, self.bus, self.rng, clock)

		flights, airports, _ = self.pipeline.arrange(data.flights, data.airports)
		self.state = SimulationState(airports=airports, flights=flights)
		self.skipped_advances = 0
		self._lock = threading.RLock()
		logger.info("Simulation ready: %d airports, %d flights", len(airports), len(flights))

	@property
	def tick_count(self) -> int:
		return self.state.tick_count

	def tick(self) -> TickOutput:
		with self._lock:
			out = self.pipeline.run_once(self.state, self.clock())
			self.skipped_advances += len(out.skipped)
			return out

	def run(self, ticks: int) -> List[TickOutput]:
		"""Run ticks back to back. A ManualClock is stepped one period per tick."""
		outputs = []
		for _ in range(ticks):
			if isinstance(self.clock, ManualClock):
				self.clock.advance(self.config.tick_seconds)
			outputs.append(self.tick())
		return outputs

	def _rearrange(self) -> None:
		flights, airports, _ = self.pipeline.arrange(self.state.flights, self.state.airports)
		self.state.flights = flights
		self.state.airports = airports

	def add_flight(self) -> Flight:
		with self._lock:
			flight = self.generator.generate(FlightPhase.TAKEOFF)
			self.state.flights.append(flight)
			self._rearrange()
			logger.info("Flight %s added %s -> %s", flight.id, flight.departure_airport, flight.arrival_airport)
			self.bus.publish(Event(FLIGHT_ADDED, {"flight_id": flight.id, "departure": flight.departure_airport, "arrival": flight.arrival_airport}, self.clock()))
			return replace(flight)

	def trigger_emergency(self, flight_id: Optional[str] = None) -> DispatchResult:
		with self._lock:
			result = self.dispatcher.dispatch(self.state, flight_id)
			if result.ok:
				self._rearrange()
			return result

	def get_flights(self) -> List[Flight]:
		"""Flights in dispatch order."""
		with self._lock:
			return [replace(f) for f in self.state.flights]

	def get_airports(self) -> List[Airport]:
		with self._lock:
			return [replace(a) for a in self.state.airports.values()]

	def get_emergencies(self) -> List[Emergency]:
		with self._lock:
			return list(self.state.emergencies)

	def get_flight(self, flight_id: str) -> Optional[Flight]:
		with self._lock:
			flight = self.state.find(flight_id)
			return replace(flight) if flight is not None else None

	def emergency_for(self, flight_id: str) -> Optional[Emergency]:
		"""Most recent emergency recorded against a flight."""
		with self._lock:
			for emergency in reversed(self.state.emergencies):
				if emergency.flight_id == flight_id:
					return emergency
			return None

	def get_stats(self) -> Dict[str, int]:
		with self._lock:
			phases = [f.phase for f in self.state.flights]
		landed = phases.count(FlightPhase.LANDED)
		return {
			"total": len(phases),
			"active": len(phases) - landed,
			"landed": landed,
			"takeoff": phases.count(FlightPhase.TAKEOFF),
			"cruising": phases.count(FlightPhase.CRUISING),
		}

	def search_flights(self, flight_id: Optional[str] = None, departure: Optional[str] = None, arrival: Optional[str] = None) -> List[Flight]:
		"""Active flights matching an id fragment and/or route, in dispatch order."""
		needle = flight_id.lower() if flight_id else None
		results = []
		for flight in self.get_flights():
			if not flight.is_active:
				continue
			if needle and needle not in flight.id.lower():
				continue
			if departure and departure != flight.departure_airport:
				continue
			if arrival and arrival != flight.arrival_airport:
				continue
			results.append(flight)
		return results

	def drain_alerts(self) -> List[Alert]:
		with self._lock:
			return self.alerter.drain()

	def flights_frame(self) -> pd.DataFrame:
		return pd.DataFrame([f.to_dict() for f in self.get_flights()])

	def airports_frame(self) -> pd.DataFrame:
		return pd.DataFrame([a.to_dict() for a in self.get_airports()])

	def emergencies_frame(self) -> pd.DataFrame:
		return pd.DataFrame([e.to_dict() for e in self.get_emergencies()], columns=["id", "flight_id", "type", "severity", "timestamp"])

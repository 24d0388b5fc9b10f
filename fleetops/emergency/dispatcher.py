from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from fleetops.agents.core import EMERGENCY_NO_ELIGIBLE, EMERGENCY_TRIGGERED, FLIGHT_STATUS_CHANGED, Event, EventBus
from fleetops.config import Config
from fleetops.generation.flights import Clock, utc_now
from fleetops.model.entities import Emergency, EmergencyType, FlightPhase, Severity, can_transition
from fleetops.model.state import SimulationState
from fleetops.utils.logging import get_logger


logger = get_logger(__name__)

DISPATCHED = "dispatched"
NO_ELIGIBLE_FLIGHT = "no_eligible_flight"
NOT_FOUND = "not_found"
INELIGIBLE = "ineligible"

EMERGENCY_TYPES = list(EmergencyType)


@dataclass
class DispatchResult:
	status: str
	emergency: Optional[Emergency] = None

	@property
	def ok(self) -> bool:
		return self.status == DISPATCHED


class EmergencyDispatcher:
	def __init__(self, config: Config, bus: EventBus, rng: np.random.Generator, clock: Clock = utc_now) -> None:
		self.config = config
		self.bus = bus
		self.rng = rng
		self.clock = clock
		self._seq = 0

	def _next_id(self) -> str:
		self._seq += 1
		return f"EM{self._seq:04d}"

	def dispatch(self, state: SimulationState, flight_id: Optional[str] = None) -> DispatchResult:
		"""Promote one flight to EMERGENCY and record the event.

		With an explicit id that matches nothing the call is a silent no-op.
		Without an id a CRUISING flight is picked at random; when there is none
		a warning notification is published and nothing changes.
		"""
		now = self.clock()
		if flight_id is not None:
			index = state.index_of(flight_id)
			if index is None:
				logger.debug("Emergency requested for unknown flight %s", flight_id)
				return DispatchResult(status=NOT_FOUND)
		else:
			cruising = [i for i, f in enumerate(state.flights) if f.phase == FlightPhase.CRUISING]
			if not cruising:
				logger.warning("No cruising flight eligible for an emergency")
				self.bus.publish(Event(EMERGENCY_NO_ELIGIBLE, {}, now))
				return DispatchResult(status=NO_ELIGIBLE_FLIGHT)
			index = cruising[int(self.rng.integers(len(cruising)))]

		target = state.flights[index]
		before = target.phase
		if not can_transition(before, FlightPhase.EMERGENCY):
			# landed flights stay frozen
			logger.info("Flight %s is %s, emergency ignored", target.id, before.value)
			return DispatchResult(status=INELIGIBLE)
		state.flights[index] = replace(target, phase=FlightPhase.EMERGENCY, priority=self.config.emergency_priority)

		emergency = Emergency(
			id=self._next_id(),
			flight_id=target.id,
			type=EMERGENCY_TYPES[int(self.rng.integers(len(EMERGENCY_TYPES)))],
			severity=Severity.HIGH,
			timestamp=now,
		)
		state.emergencies.append(emergency)
		logger.info("Emergency %s (%s) on flight %s", emergency.id, emergency.type.value, target.id)

		if before != FlightPhase.EMERGENCY:
			self.bus.publish(Event(FLIGHT_STATUS_CHANGED, {"flight_id": target.id, "from": before.value, "to": FlightPhase.EMERGENCY.value}, now))
		self.bus.publish(Event(EMERGENCY_TRIGGERED, {"flight_id": target.id, "emergency_id": emergency.id, "type": emergency.type.value, "severity": emergency.severity.value}, now))
		return DispatchResult(status=DISPATCHED, emergency=emergency)

"""
Flight, Airport and Emergency records.

All three are plain dataclasses. The engine never mutates a published
Flight in place during a tick: it builds the next state with
``dataclasses.replace`` and swaps the whole collection at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class FlightPhase(Enum):
	"""Operational state of a flight."""
	TAKEOFF = "takeoff"
	CRUISING = "cruising"
	LANDING = "landing"
	EMERGENCY = "emergency"
	LANDED = "landed"
	HOLDING = "holding"  # reserved; only produced with runway enforcement enabled


TRANSITIONS: Dict[FlightPhase, FrozenSet[FlightPhase]] = {
	FlightPhase.TAKEOFF: frozenset({FlightPhase.CRUISING, FlightPhase.LANDING, FlightPhase.EMERGENCY, FlightPhase.HOLDING}),
	FlightPhase.CRUISING: frozenset({FlightPhase.LANDING, FlightPhase.EMERGENCY, FlightPhase.HOLDING}),
	FlightPhase.LANDING: frozenset({FlightPhase.EMERGENCY, FlightPhase.LANDED}),
	FlightPhase.HOLDING: frozenset({FlightPhase.LANDING, FlightPhase.EMERGENCY}),
	# No exit from EMERGENCY until the process restarts.
	FlightPhase.EMERGENCY: frozenset(),
	FlightPhase.LANDED: frozenset(),
}

# Phases that claim a runway at the arrival airport.
RUNWAY_DEMAND_PHASES: FrozenSet[FlightPhase] = frozenset({FlightPhase.LANDING, FlightPhase.EMERGENCY})


def can_transition(current: FlightPhase, target: FlightPhase) -> bool:
	return current == target or target in TRANSITIONS[current]


class EmergencyType(Enum):
	TECHNICAL = "technical"
	WEATHER = "weather"
	MEDICAL = "medical"
	FUEL = "fuel"


class Severity(Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"


@dataclass(frozen=True)
class Position:
	"""Latitude/longitude in degrees, treated as planar coordinates."""
	latitude: float
	longitude: float

	def as_tuple(self) -> Tuple[float, float]:
		return (self.latitude, self.longitude)


@dataclass
class Flight:
	id: str
	position: Position
	altitude: float  # feet
	speed: float  # knots
	phase: FlightPhase
	departure_airport: str
	arrival_airport: str
	fuel_level: float  # percent
	priority: int
	estimated_arrival_time: datetime
	takeoff_timestamp: Optional[datetime] = None
	heading: float = 0.0  # degrees toward the arrival airport

	@property
	def is_active(self) -> bool:
		return self.phase != FlightPhase.LANDED

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"latitude": self.position.latitude,
			"longitude": self.position.longitude,
			"altitude": self.altitude,
			"speed": self.speed,
			"heading": self.heading,
			"status": self.phase.value,
			"departure_airport": self.departure_airport,
			"arrival_airport": self.arrival_airport,
			"fuel_level": self.fuel_level,
			"priority": self.priority,
			"estimated_arrival_time": self.estimated_arrival_time.isoformat(),
			"takeoff_timestamp": self.takeoff_timestamp.isoformat() if self.takeoff_timestamp else None,
		}


@dataclass
class Airport:
	code: str
	name: str
	position: Position
	total_runways: int
	available_runways: Optional[int] = None  # defaults to total_runways

	def __post_init__(self) -> None:
		if self.total_runways < 0:
			raise ValueError(f"Airport {self.code} has negative runway count")
		if self.available_runways is None:
			self.available_runways = self.total_runways
		self.available_runways = max(0, min(self.available_runways, self.total_runways))

	def to_dict(self) -> dict:
		return {
			"code": self.code,
			"name": self.name,
			"latitude": self.position.latitude,
			"longitude": self.position.longitude,
			"runways": self.total_runways,
			"available_runways": self.available_runways,
		}


@dataclass(frozen=True)
class Emergency:
	id: str
	flight_id: str
	type: EmergencyType
	severity: Severity
	timestamp: datetime

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"flight_id": self.flight_id,
			"type": self.type.value,
			"severity": self.severity.value,
			"timestamp": self.timestamp.isoformat(),
		}

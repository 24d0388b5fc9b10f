from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List


# Event types published by the engine
FLIGHT_ADDED = "flight.added"
FLIGHT_STATUS_CHANGED = "flight.status_changed"
FLIGHT_LOW_FUEL = "flight.low_fuel"
FLIGHT_SKIPPED = "flight.skipped"
EMERGENCY_TRIGGERED = "emergency.triggered"
EMERGENCY_NO_ELIGIBLE = "emergency.no_eligible_flight"


@dataclass
class Event:
	type: str
	payload: Dict[str, Any]
	timestamp: datetime


class EventBus:
	def __init__(self) -> None:
		self.subscribers: Dict[str, List[Callable[[Event], None]]] = {}
		self.published = 0

	def subscribe(self, event_type: str, handler: Callable[[Event], None]) -> None:
		self.subscribers.setdefault(event_type, []).append(handler)

	def publish(self, evt: Event) -> None:
		self.published += 1
		for handler in self.subscribers.get(evt.type, []):
			handler(evt)

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, List

from fleetops.agents.core import (
	EMERGENCY_NO_ELIGIBLE,
	EMERGENCY_TRIGGERED,
	FLIGHT_ADDED,
	FLIGHT_LOW_FUEL,
	FLIGHT_SKIPPED,
	FLIGHT_STATUS_CHANGED,
	Event,
	EventBus,
)
from fleetops.config import Config


INFO = "info"
WARNING = "warning"
CRITICAL = "critical"


@dataclass
class Alert:
	type: str
	message: str
	level: str
	timestamp: datetime
	meta: Dict[str, str]


class AlertAgent:
	"""Turns engine events into user-facing notifications.

	Alerts are kept in a bounded queue until the presentation layer drains them.
	"""

	def __init__(self, config: Config, bus: EventBus) -> None:
		self.config = config
		self.queue: Deque[Alert] = deque(maxlen=config.max_alerts)
		self.total = 0
		bus.subscribe(FLIGHT_ADDED, self.on_flight_added)
		bus.subscribe(FLIGHT_STATUS_CHANGED, self.on_status_changed)
		bus.subscribe(FLIGHT_LOW_FUEL, self.on_low_fuel)
		bus.subscribe(FLIGHT_SKIPPED, self.on_skipped)
		bus.subscribe(EMERGENCY_TRIGGERED, self.on_emergency)
		bus.subscribe(EMERGENCY_NO_ELIGIBLE, self.on_no_eligible)

	def _push(self, evt: Event, message: str, level: str) -> None:
		self.queue.append(Alert(
			type=evt.type,
			message=message,
			level=level,
			timestamp=evt.timestamp,
			meta={k: str(v) for k, v in evt.payload.items()},
		))
		self.total += 1

	def on_flight_added(self, evt: Event) -> None:
		p = evt.payload
		self._push(evt, f"New flight {p['flight_id']} scheduled {p['departure']} -> {p['arrival']}", INFO)

	def on_status_changed(self, evt: Event) -> None:
		p = evt.payload
		self._push(evt, f"Flight {p['flight_id']} is now {p['to']}", INFO)

	def on_low_fuel(self, evt: Event) -> None:
		p = evt.payload
		self._push(evt, f"Flight {p['flight_id']} low on fuel ({float(p['fuel_level']):.1f}%)", WARNING)

	def on_skipped(self, evt: Event) -> None:
		p = evt.payload
		self._push(evt, f"Flight {p['flight_id']} not advanced: {p['reason']}", WARNING)

	def on_emergency(self, evt: Event) -> None:
		p = evt.payload
		self._push(evt, f"Emergency ({p['type']}) declared on flight {p['flight_id']}", CRITICAL)

	def on_no_eligible(self, evt: Event) -> None:
		self._push(evt, "No cruising flight available for an emergency", WARNING)

	def drain(self) -> List[Alert]:
		alerts = list(self.queue)
		self.queue.clear()
		return alerts

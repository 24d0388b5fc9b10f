from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fleetops.model.entities import Airport, Emergency, Flight


@dataclass
class SimulationState:
	"""Everything the engine mutates. Owned by a single Simulation."""
	airports: Dict[str, Airport]
	flights: List[Flight] = field(default_factory=list)
	emergencies: List[Emergency] = field(default_factory=list)
	tick_count: int = 0

	def index_of(self, flight_id: str) -> Optional[int]:
		for i, flight in enumerate(self.flights):
			if flight.id == flight_id:
				return i
		return None

	def find(self, flight_id: str) -> Optional[Flight]:
		i = self.index_of(flight_id)
		return None if i is None else self.flights[i]

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from fleetops.config import Config
from fleetops.errors import ConfigurationError
from fleetops.generation.flights import Clock, FlightGenerator, utc_now
from fleetops.model.entities import Airport, Flight, FlightPhase, Position


@dataclass
class IngestedData:
	airports: Dict[str, Airport]
	flights: List[Flight]
	generator: FlightGenerator


def load_airports(config: Config) -> Dict[str, Airport]:
	"""Build the airport registry, keyed by code, from config rows."""
	airports: Dict[str, Airport] = {}
	for row in config.airports:
		try:
			code = str(row["code"])
			airport = Airport(
				code=code,
				name=str(row.get("name", code)),
				position=Position(float(row["latitude"]), float(row["longitude"])),
				total_runways=int(row["runways"]),
			)
		except (KeyError, TypeError, ValueError) as exc:
			raise ConfigurationError(f"Malformed airport entry {row!r}: {exc}") from exc
		if code in airports:
			raise ConfigurationError(f"Duplicate airport code {code}")
		airports[code] = airport
	if len(airports) < 2:
		raise ConfigurationError(f"Airport registry needs at least 2 airports, got {len(airports)}")
	return airports


class DataIngestion:
	def __init__(self, config: Config, clock: Clock = utc_now) -> None:
		self.config = config
		self.clock = clock

	def simulate(self, rng: Optional[np.random.Generator] = None) -> IngestedData:
		if self.config.tick_seconds <= 0:
			raise ConfigurationError("tick_seconds must be positive")
		airports = load_airports(self.config)
		generator = FlightGenerator(self.config, airports, rng=rng, clock=self.clock)
		try:
			phases = [FlightPhase(p) for p in self.config.initial_phases]
		except ValueError as exc:
			raise ConfigurationError(f"Unknown initial phase: {exc}") from exc
		flights = [generator.generate(phase) for phase in phases]
		return IngestedData(airports=airports, flights=flights, generator=generator)

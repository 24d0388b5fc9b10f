from dataclasses import dataclass
from typing import Tuple


DEFAULT_AIRPORTS: Tuple[dict, ...] = (
	{"code": "LHE", "name": "Allama Iqbal International", "latitude": 31.5216, "longitude": 74.4036, "runways": 2},
	{"code": "KHI", "name": "Jinnah International", "latitude": 24.9065, "longitude": 67.1608, "runways": 2},
	{"code": "ISB", "name": "Islamabad International", "latitude": 33.5490, "longitude": 72.8258, "runways": 2},
	{"code": "DXB", "name": "Dubai International", "latitude": 25.2532, "longitude": 55.3657, "runways": 2},
	{"code": "DEL", "name": "Indira Gandhi International", "latitude": 28.5562, "longitude": 77.1000, "runways": 3},
	{"code": "DOH", "name": "Hamad International", "latitude": 25.2731, "longitude": 51.6081, "runways": 2},
	{"code": "IST", "name": "Istanbul Airport", "latitude": 41.2753, "longitude": 28.7519, "runways": 5},
	{"code": "BKK", "name": "Suvarnabhumi Airport", "latitude": 13.6900, "longitude": 100.7501, "runways": 2},
)


@dataclass
class Config:
	seed: int = 42

	# Tick cadence in seconds of wall-clock time
	tick_seconds: float = 1.0

	# Airport registry, fixed for the lifetime of a simulation
	airports: Tuple[dict, ...] = DEFAULT_AIRPORTS

	# Initial fleet, one flight per entry
	initial_phases: Tuple[str, ...] = ("cruising", "cruising", "cruising", "takeoff", "takeoff", "landed")

	# Motion
	takeoff_timeout_seconds: float = 30.0
	approach_factor: float = 0.01      # fraction of remaining lat/lon delta covered per tick
	landing_distance_deg: float = 0.5  # planar distance that starts the landing phase
	descent_step_ft: float = 1000.0

	# Fuel
	fuel_burn_per_tick: float = 0.1
	low_fuel_threshold: float = 20.0

	emergency_priority: int = 10

	# Generator bands
	speed_range_kts: Tuple[float, float] = (300.0, 800.0)
	takeoff_altitude_ft: Tuple[float, float] = (1000.0, 6000.0)
	cruise_altitude_ft: Tuple[float, float] = (25000.0, 40000.0)
	cruise_fuel_range: Tuple[float, float] = (60.0, 90.0)
	takeoff_fuel: float = 95.0
	landed_fuel: float = 10.0

	# Bounded notification queue handed to the UI
	max_alerts: int = 200

	# Opt-in behaviour, both off to match the reference engine
	enforce_runway_capacity: bool = False  # park flights in HOLDING when no runway is free
	complete_landings: bool = False        # LANDING at 0 ft becomes LANDED

from datetime import datetime, timezone

import pytest

from fleetops.config import Config
from fleetops.model.entities import Flight, FlightPhase, Position


T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

TEST_AIRPORTS = (
	{"code": "JFK", "name": "John F. Kennedy International", "latitude": 40.6413, "longitude": -73.7781, "runways": 4},
	{"code": "LAX", "name": "Los Angeles International", "latitude": 33.9416, "longitude": -118.4085, "runways": 4},
)


@pytest.fixture
def config():
	return Config(airports=TEST_AIRPORTS, initial_phases=())


@pytest.fixture
def make_flight():
	def _make(
		flight_id="FL0001",
		phase=FlightPhase.CRUISING,
		fuel=80.0,
		priority=1,
		arrival="JFK",
		departure="LAX",
		lat=33.9416,
		lon=-118.4085,
		altitude=30000.0,
		takeoff=None,
	):
		return Flight(
			id=flight_id,
			position=Position(lat, lon),
			altitude=altitude,
			speed=450.0,
			phase=phase,
			departure_airport=departure,
			arrival_airport=arrival,
			fuel_level=fuel,
			priority=priority,
			estimated_arrival_time=T0,
			takeoff_timestamp=takeoff,
		)
	return _make

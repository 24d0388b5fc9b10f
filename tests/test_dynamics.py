from datetime import timedelta

import numpy as np
import pytest

from fleetops.agents.core import FLIGHT_LOW_FUEL, FLIGHT_STATUS_CHANGED, EventBus
from fleetops.config import Config
from fleetops.dynamics.advance import FlightAdvancer
from fleetops.generation.flights import FlightGenerator
from fleetops.ingestion.data_sources import load_airports
from fleetops.model.entities import FlightPhase
from fleetops.model.state import SimulationState
from fleetops.orchestrator.clock import ManualClock
from fleetops.orchestrator.pipeline import TickPipeline
from fleetops.orchestrator.sim import Simulation

from conftest import T0, TEST_AIRPORTS

JFK = (40.6413, -73.7781)


def make_advancer(config):
	airports = load_airports(config)
	return FlightAdvancer(config, FlightGenerator(config, airports, rng=np.random.default_rng(0))), airports


def test_fuel_non_increasing_and_bounded():
	sim = Simulation(Config(initial_phases=("cruising",) * 4 + ("takeoff",) * 4), clock=ManualClock())
	previous = {f.id: f.fuel_level for f in sim.get_flights()}
	for _ in range(300):
		sim.run(1)
		for flight in sim.get_flights():
			assert 0.0 <= flight.fuel_level <= 100.0
			assert flight.fuel_level <= previous[flight.id]
			previous[flight.id] = flight.fuel_level


def test_fuel_floors_at_zero(config, make_flight):
	advancer, airports = make_advancer(config)
	flight = make_flight(fuel=0.05)
	nxt = advancer.step(flight, airports, T0).flight
	assert nxt.fuel_level == 0.0
	assert advancer.step(nxt, airports, T0).flight.fuel_level == 0.0


def test_landed_flight_is_frozen():
	sim = Simulation(Config(initial_phases=("landed", "cruising")), clock=ManualClock())
	landed = next(f for f in sim.get_flights() if f.phase == FlightPhase.LANDED)
	assert landed.altitude == 0
	sim.run(50)
	assert sim.get_flight(landed.id) == landed


def test_takeoff_times_out_into_cruising():
	clock = ManualClock()
	sim = Simulation(Config(initial_phases=("takeoff",)), clock=clock)
	before = sim.get_flights()[0]
	sim.run(29)
	at_29 = sim.get_flight(before.id)
	assert at_29.phase == FlightPhase.TAKEOFF

	sim.run(1)
	after = sim.get_flight(before.id)
	assert after.phase == FlightPhase.CRUISING
	assert 25000 <= after.altitude <= 40000
	assert (after.id, after.departure_airport, after.arrival_airport) == (before.id, before.departure_airport, before.arrival_airport)
	assert at_29.fuel_level - after.fuel_level == pytest.approx(0.1)
	assert after.fuel_level == pytest.approx(95.0 - 3.0)
	assert any(a.type == FLIGHT_STATUS_CHANGED and a.meta["to"] == "cruising" for a in sim.drain_alerts())


def test_position_moves_one_percent(config, make_flight):
	advancer, airports = make_advancer(config)
	flight = make_flight(lat=30.0, lon=-100.0)
	nxt = advancer.step(flight, airports, T0).flight
	assert nxt.position.latitude == pytest.approx(30.0 + (JFK[0] - 30.0) * 0.01)
	assert nxt.position.longitude == pytest.approx(-100.0 + (JFK[1] + 100.0) * 0.01)
	assert flight.position.latitude == 30.0  # input untouched


def test_enters_landing_and_descends(config, make_flight):
	advancer, airports = make_advancer(config)
	flight = make_flight(lat=JFK[0] + 0.4, lon=JFK[1], altitude=1500.0)
	result = advancer.step(flight, airports, T0)
	assert result.flight.phase == FlightPhase.LANDING
	assert result.flight.altitude == 500.0
	assert (FLIGHT_STATUS_CHANGED, {"flight_id": flight.id, "from": "cruising", "to": "landing"}) in result.events

	again = advancer.step(result.flight, airports, T0).flight
	assert again.altitude == 0.0
	# no automatic LANDED by default
	assert advancer.step(again, airports, T0).flight.phase == FlightPhase.LANDING


def test_emergency_flight_never_switches_to_landing(config, make_flight):
	advancer, airports = make_advancer(config)
	flight = make_flight(phase=FlightPhase.EMERGENCY, lat=JFK[0] + 0.1, lon=JFK[1])
	nxt = advancer.step(flight, airports, T0).flight
	assert nxt.phase == FlightPhase.EMERGENCY
	assert nxt.altitude == flight.altitude


def test_complete_landings_flag(make_flight):
	cfg = Config(airports=TEST_AIRPORTS, complete_landings=True)
	advancer, airports = make_advancer(cfg)
	flight = make_flight(phase=FlightPhase.LANDING, lat=JFK[0] + 0.1, lon=JFK[1], altitude=1500.0, fuel=50.0)
	first = advancer.step(flight, airports, T0).flight
	assert first.phase == FlightPhase.LANDING
	second = advancer.step(first, airports, T0).flight
	assert second.phase == FlightPhase.LANDED
	assert advancer.step(second, airports, T0).flight == second


def test_low_fuel_alert_fires_on_crossing_only(config, make_flight):
	advancer, airports = make_advancer(config)
	flight = make_flight(fuel=20.05)
	first = advancer.step(flight, airports, T0)
	assert [e for e, _ in first.events] == [FLIGHT_LOW_FUEL]
	second = advancer.step(first.flight, airports, T0)
	assert second.events == []

	emergency = make_flight(phase=FlightPhase.EMERGENCY, fuel=20.05)
	assert advancer.step(emergency, airports, T0).events == []


def test_unknown_arrival_airport_is_skipped():
	sim = Simulation(Config(initial_phases=("cruising", "cruising")), clock=ManualClock())
	sim.drain_alerts()
	stray = sim.state.flights[0]
	stray.arrival_airport = "ZZZ"
	other_id = sim.state.flights[1].id
	other_before = sim.get_flight(other_id)

	out = sim.run(1)[0]
	assert out.skipped == [stray.id]
	assert sim.skipped_advances == 1
	assert sim.get_flight(stray.id).fuel_level == stray.fuel_level
	assert sim.get_flight(other_id).fuel_level < other_before.fuel_level
	assert [a.type for a in sim.drain_alerts()] == ["flight.skipped"]


def test_runway_enforcement_holds_second_flight(make_flight):
	airports_cfg = tuple(dict(a, runways=1) if a["code"] == "JFK" else a for a in TEST_AIRPORTS)
	cfg = Config(airports=airports_cfg, initial_phases=(), enforce_runway_capacity=True)
	advancer, airports = make_advancer(cfg)
	pipeline = TickPipeline(cfg, advancer, EventBus())
	first = make_flight("FL0001", lat=JFK[0] + 0.3, lon=JFK[1])
	second = make_flight("FL0002", lat=JFK[0] - 0.3, lon=JFK[1])
	state = SimulationState(airports=airports, flights=[first, second])

	pipeline.run_once(state, T0)
	phases = {f.id: f.phase for f in state.flights}
	assert phases == {"FL0001": FlightPhase.LANDING, "FL0002": FlightPhase.HOLDING}
	assert state.airports["JFK"].available_runways == 0

	pipeline.run_once(state, T0 + timedelta(seconds=1))
	assert state.find("FL0002").phase == FlightPhase.HOLDING


def test_runway_enforcement_off_by_default(config, make_flight):
	advancer, airports = make_advancer(config)
	for airport in airports.values():
		airport.available_runways = 0
	pipeline = TickPipeline(config, advancer, EventBus())
	state = SimulationState(airports=airports, flights=[make_flight(lat=JFK[0] + 0.3, lon=JFK[1])])
	pipeline.run_once(state, T0)
	assert state.flights[0].phase == FlightPhase.LANDING


def test_failing_flight_does_not_stop_the_others():
	sim = Simulation(Config(initial_phases=("takeoff", "cruising")), clock=ManualClock())
	sim.drain_alerts()
	broken = next(f for f in sim.state.flights if f.phase == FlightPhase.TAKEOFF)
	broken.takeoff_timestamp = broken.takeoff_timestamp.replace(tzinfo=None)
	healthy = next(f for f in sim.get_flights() if f.phase == FlightPhase.CRUISING)

	out = sim.run(1)[0]
	assert out.skipped == [broken.id]
	assert sim.skipped_advances == 1
	assert sim.get_flight(broken.id).fuel_level == broken.fuel_level
	assert sim.get_flight(healthy.id).fuel_level < healthy.fuel_level
	assert sim.get_flight(healthy.id).position != healthy.position
	alerts = sim.drain_alerts()
	assert [a.type for a in alerts] == ["flight.skipped"]
	assert "TypeError" in alerts[0].meta["reason"]

	# the loop keeps going on later ticks
	sim.run(3)
	assert sim.tick_count == 4
	assert sim.skipped_advances == 4

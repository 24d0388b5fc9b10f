import json
import time

import click

from fleetops.config import Config
from fleetops.orchestrator.clock import ManualClock, SimulationClock
from fleetops.orchestrator.sim import Simulation
from fleetops.utils.logging import log_to_stderr, set_level


def _summary(sim: Simulation) -> dict:
	return {
		"ticks": sim.tick_count,
		"stats": sim.get_stats(),
		"dispatch_order": [f"{f.id}:{f.phase.value}" for f in sim.get_flights()],
		"airports": {a.code: {"runways": a.total_runways, "available": a.available_runways} for a in sim.get_airports()},
		"emergencies": [e.to_dict() for e in sim.get_emergencies()],
		"skipped_advances": sim.skipped_advances,
		"alerts": [
			{"type": a.type, "level": a.level, "message": a.message}
			for a in sim.drain_alerts()
		],
	}


@click.group()
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), default="WARNING", show_default=True)
def main(log_level: str) -> None:
	"""Flight fleet simulation CLI."""
	# stdout carries the JSON result
	log_to_stderr()
	set_level(log_level)


@main.command()
@click.option("--ticks", type=int, default=60, show_default=True)
@click.option("--add", "add_flights", type=int, default=0, show_default=True, help="Extra flights added before the first tick.")
@click.option("--seed", type=int, default=42, show_default=True)
@click.option("--enforce-runways", is_flag=True, help="Hold flights when no runway is free.")
@click.option("--complete-landings", is_flag=True, help="Let landing flights reach LANDED at 0 ft.")
def run(ticks: int, add_flights: int, seed: int, enforce_runways: bool, complete_landings: bool) -> None:
	"""Run ticks back to back on simulated time and print the final state."""
	cfg = Config(seed=seed, enforce_runway_capacity=enforce_runways, complete_landings=complete_landings)
	sim = Simulation(cfg, clock=ManualClock())
	for _ in range(add_flights):
		sim.add_flight()
	sim.run(ticks)
	click.echo(json.dumps(_summary(sim), indent=2))


@main.command()
@click.option("--ticks", type=int, default=10, show_default=True)
@click.option("--flight-id", type=str, default=None, help="Target flight; a random cruising flight when omitted.")
@click.option("--seed", type=int, default=42, show_default=True)
def emergency(ticks: int, flight_id: str, seed: int) -> None:
	"""Run some ticks, declare an emergency, run the same number again."""
	sim = Simulation(Config(seed=seed), clock=ManualClock())
	sim.run(ticks)
	result = sim.trigger_emergency(flight_id)
	sim.run(ticks)
	res = {"status": result.status, "emergency": result.emergency.to_dict() if result.emergency else None}
	res.update(_summary(sim))
	click.echo(json.dumps(res, indent=2))


@main.command()
@click.option("--seconds", type=float, default=10.0, show_default=True)
@click.option("--period", type=float, default=1.0, show_default=True)
def simulate(seconds: float, period: float) -> None:
	"""Drive the engine on its real-time clock for a while."""
	sim = Simulation(Config(tick_seconds=period))
	with SimulationClock(sim):
		time.sleep(seconds)
	click.echo(json.dumps(_summary(sim), indent=2))

from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

from fleetops.utils.logging import get_logger

if TYPE_CHECKING:
	from fleetops.orchestrator.sim import Simulation


logger = get_logger(__name__)


class ManualClock:
	"""Deterministic time source; moves only when told to."""

	def __init__(self, start: Optional[datetime] = None) -> None:
		self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

	def __call__(self) -> datetime:
		return self.now

	def advance(self, seconds: float) -> datetime:
		self.now += timedelta(seconds=seconds)
		return self.now


class SimulationClock:
	"""
	Fixed-period tick driver.

	A single worker thread calls ``Simulation.tick`` every ``period`` seconds.
	Ticks never overlap: the next deadline is only waited on once the current
	tick has returned. ``stop`` lets an in-progress tick finish before the
	thread exits.
	"""

	def __init__(self, simulation: Simulation, period: Optional[float] = None, name: str = "fleetops-clock") -> None:
		self.simulation = simulation
		self.period = period if period is not None else simulation.config.tick_seconds
		if self.period <= 0:
			raise ValueError("period must be positive")
		self.name = name
		self.error: Optional[BaseException] = None
		self._stop = threading.Event()
		self._thread: Optional[threading.Thread] = None

	def start(self) -> None:
		if self.is_running():
			return
		logger.info("%s starting (period=%.2fs)", self.name, self.period)
		self._stop.clear()
		self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
		self._thread.start()

	def stop(self, timeout: Optional[float] = None) -> None:
		logger.info("%s stopping", self.name)
		self._stop.set()
		if self._thread is not None and self._thread is not threading.current_thread():
			self._thread.join(timeout)
		logger.info("%s stopped after %d ticks", self.name, self.simulation.tick_count)

	def is_running(self) -> bool:
		return self._thread is not None and self._thread.is_alive()

	def _loop(self) -> None:
		deadline = time.monotonic() + self.period
		while not self._stop.wait(max(0.0, deadline - time.monotonic())):
			try:
				self.simulation.tick()
			except Exception as exc:  # pylint: disable=broad-exception-caught
				logger.exception("Tick failed, stopping %s", self.name)
				self.error = exc
				self._stop.set()
				break
			deadline += self.period
			# fell behind by more than a period: resync instead of bursting
			if deadline < time.monotonic():
				deadline = time.monotonic() + self.period

	def __enter__(self) -> SimulationClock:
		self.start()
		return self

	def __exit__(self, *exc_info) -> None:
		self.stop()

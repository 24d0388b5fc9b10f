import logging
import sys

ROOT = "fleetops"
FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
	logger = logging.getLogger(name)
	if not logger.handlers:
		handler = logging.StreamHandler(stream=sys.stdout)
		formatter = logging.Formatter(FORMAT, datefmt="%H:%M:%S")
		handler.setFormatter(formatter)
		logger.addHandler(handler)
		logger.setLevel(logging.INFO)
	logger.propagate = False
	return logger


class StderrHandler(logging.StreamHandler):
	"""Writes to whatever ``sys.stderr`` is when a record is emitted."""

	def __init__(self) -> None:
		logging.Handler.__init__(self)

	@property
	def stream(self):
		return sys.stderr


def _fleetops_loggers():
	for name, logger in logging.Logger.manager.loggerDict.items():
		if isinstance(logger, logging.Logger) and (name == ROOT or name.startswith(ROOT + ".")):
			yield logger


def set_level(level: str | int) -> None:
	"""Apply one level to every fleetops logger created so far."""
	if isinstance(level, str):
		level = logging.getLevelName(level.upper())
	for logger in _fleetops_loggers():
		logger.setLevel(level)


def log_to_stderr() -> None:
	"""Move every fleetops logger off stdout, leaving stdout to command output."""
	for logger in _fleetops_loggers():
		for handler in list(logger.handlers):
			logger.removeHandler(handler)
		handler = StderrHandler()
		handler.setFormatter(logging.Formatter(FORMAT, datefmt="%H:%M:%S"))
		logger.addHandler(handler)

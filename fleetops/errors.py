class ConfigurationError(ValueError):
	"""Raised at startup when the engine cannot be built from the given Config."""


class UnknownAirportError(LookupError):
	"""A flight references an airport code missing from the registry."""

	def __init__(self, code: str, flight_id: str | None = None) -> None:
		self.code = code
		self.flight_id = flight_id
		where = f" (flight {flight_id})" if flight_id else ""
		super().__init__(f"Unknown airport {code!r}{where}")

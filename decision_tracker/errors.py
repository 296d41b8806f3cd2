class DecisionTrackerError(Exception):
    """Base class for errors surfaced to callers as an error envelope."""


class ConfigurationError(DecisionTrackerError):
    """A required credential or setting is missing."""


class UpstreamError(DecisionTrackerError):
    """The upstream API answered with a non-success status."""


class InvalidModelOutputError(DecisionTrackerError):
    """The model reply was not JSON of the requested shape."""

"""
Exceptions raised by the Shared-Medium Hub Simulator.
"""


class HubSimulatorError(Exception):
    """Base class for all simulator errors."""
    pass


class CapacityExceeded(HubSimulatorError):
    """Raised when a station is registered on a full hub."""

    def __init__(self, capacity):
        super().__init__(f"Hub is full ({capacity} stations maximum)")
        self.capacity = capacity


class RegistrySealedError(HubSimulatorError):
    """Raised when a station is registered after relaying has started."""
    pass


class TransportFault(HubSimulatorError):
    """
    A read or write failed on a transport endpoint.
    Fatal to the one listener or agent that hit it, never to the whole hub.
    """

    def __init__(self, endpoint_name, operation, cause=None):
        message = f"{operation} failed on {endpoint_name}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.endpoint_name = endpoint_name
        self.operation = operation
        self.cause = cause


class StationConfigError(HubSimulatorError):
    """Raised when a station configuration file is unreadable or corrupted."""
    pass

"""Exceptions raised by the dashboard core."""


class DashboardError(Exception):
    """Base class for dashboard computation errors."""


class ConfigurationError(DashboardError):
    """A shift / working-time-type pair has no configured time window."""


class NotFoundError(DashboardError):
    """A resource the computation depends on does not exist."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")

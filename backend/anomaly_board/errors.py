"""
Error taxonomy for the dashboard pipeline.

Every failure is scoped to the section that triggered it; nothing here is
fatal to the whole view.
"""


class DashboardError(Exception):
    code = "DASHBOARD_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.code
        self.message = message


class NetworkError(DashboardError):
    """Transport failure or non-2xx response from the upstream API."""

    code = "NETWORK_ERROR"


class PayloadError(NetworkError):
    """Upstream answered, but the body does not have the expected shape."""

    code = "PAYLOAD_ERROR"


class ValidationError(DashboardError):
    """Caller input rejected before any state change or request."""

    code = "VALIDATION_ERROR"

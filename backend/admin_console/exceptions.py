"""Error taxonomy shared by the models, the rules engine and the controller."""


class ConsoleError(Exception):
    """Base class for every error the console surfaces to an operator."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ConsoleError):
    """An illegal transition or a malformed action payload.

    Always raised before any upstream call is made.
    """


class UnauthorizedError(ConsoleError):
    """Credentials were refused or the session expired mid-action."""

    INVALID_CREDENTIALS = "invalid_credentials"
    ROLE_MISMATCH = "role_mismatch"
    ACCOUNT_INACTIVE = "account_inactive"
    SESSION_EXPIRED = "session_expired"

    def __init__(self, message: str, reason: str = SESSION_EXPIRED, upstream_message: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.upstream_message = upstream_message


class GatewayError(ConsoleError):
    """The upstream marketplace API call failed.

    ``upstream_message`` holds the message from the response body when the
    API sent one; callers show it verbatim and fall back to their own text
    otherwise.
    """

    def __init__(self, message: str, status_code: int | None = None, upstream_message: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.upstream_message = upstream_message


class AggregationPartialFailure(ConsoleError):
    """At least one call of a dashboard refresh fan-out failed."""

    def __init__(self, failures: dict[str, Exception]):
        names = ", ".join(sorted(failures))
        super().__init__(f"Dashboard refresh failed ({names})")
        self.failures = failures

from enum import Enum

# Statuses that must not carry a response body.
BODYLESS_STATUSES = frozenset({204, 205, 304})

MOCK_MODE_HINT = (
    "Set MOCK_MODE=true to serve synthetic data while the upstream API is unavailable."
)


class FailureKind(str, Enum):
    UNREACHABLE = "upstream_unreachable"
    AUTH_OR_PROTOCOL = "upstream_auth_failed"
    UPSTREAM_STATUS = "upstream_status"
    MALFORMED_RESPONSE = "malformed_response"


class GatewayError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        hint: str | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.hint = hint

    @classmethod
    def upstream_unreachable(cls, reason: str):
        return cls(
            FailureKind.UNREACHABLE.value,
            f"Upstream request failed: {reason}",
            502,
            MOCK_MODE_HINT,
        )

    @classmethod
    def upstream_auth_failed(cls):
        return cls(
            FailureKind.AUTH_OR_PROTOCOL.value,
            "Upstream returned an HTML page instead of JSON. "
            "Check AUTH_USER/AUTH_PASS, the BASE_URL and the authentication method.",
            401,
            MOCK_MODE_HINT,
        )

    @classmethod
    def upstream_status(cls, status: int, excerpt: str):
        # Mirror the upstream status unless it cannot carry the error body.
        mirrored = 502 if status < 200 or status in BODYLESS_STATUSES else status
        return cls(
            FailureKind.UPSTREAM_STATUS.value,
            excerpt or f"Upstream returned status {status}.",
            mirrored,
            MOCK_MODE_HINT,
        )

    @classmethod
    def malformed_response(cls, detail: str):
        return cls(
            FailureKind.MALFORMED_RESPONSE.value,
            f"Could not parse upstream response: {detail}",
            500,
            MOCK_MODE_HINT,
        )

    @classmethod
    def session_unavailable(cls, reason: str):
        return cls(
            "session_unavailable",
            f"Could not create upstream HTTP session: {reason}",
            500,
            MOCK_MODE_HINT,
        )

    @property
    def kind(self) -> FailureKind | None:
        try:
            return FailureKind(self.code)
        except ValueError:
            return None

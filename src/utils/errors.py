"""
Error taxonomy for the push dispatcher.

Every failure the pipeline can report is one of the classes below. Each
class maps to exactly one HTTP status and one client-facing message;
upstream and configuration failures all collapse to a generic 500 so the
caller never learns which secret or recipient was at fault.
"""

from typing import Any, Dict

GENERIC_SERVER_ERROR = "Internal server error"


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    public_message = GENERIC_SERVER_ERROR
    detail = "Internal error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.detail)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.public_message}


# --- configuration / upstream (5xx) ----------------------------------------


class SsmError(ApiError):
    detail = "Failed to load secrets from SSM"


class MissingSecret(ApiError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Missing expected secret: {key}")


class MissingEnvVar(ApiError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing environment variable: {name}")


class InvalidEnvVar(ApiError):
    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for environment variable {name}: {value!r}")


class SupabaseInitialization(ApiError):
    detail = "Failed to initialize Supabase client"


class SupabaseFetch(ApiError):
    detail = "Failed to fetch tokens from Supabase"


class PushMessageBuild(ApiError):
    detail = "Failed to build push message"


class DispatchFailed(ApiError):
    public_message = "Failed to send some push notifications"

    def __init__(self, failed: int, total: int):
        self.failed = failed
        self.total = total
        super().__init__(f"{failed} of {total} push notifications failed")


# --- request validation (4xx) ----------------------------------------------


class InvalidApiKey(ApiError):
    status_code = 403
    public_message = "Forbidden: Invalid API Key"
    detail = "Invalid API Key"


class InvalidBody(ApiError):
    status_code = 400
    public_message = "Invalid request body"
    detail = "Invalid request body"


class BadRequest(ApiError):
    status_code = 400

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Bad request: {field} is required")

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return f"{self.field} is required"


class InvalidPushToken(ApiError):
    status_code = 400
    public_message = "Invalid expo push token"
    detail = "Invalid expo push token"


class MethodNotAllowed(ApiError):
    status_code = 405
    public_message = "Method not allowed"

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Method not allowed: {method or '<none>'}")

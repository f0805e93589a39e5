import re

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class ZooCareError(Exception):
    status_code = 500

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_json(self) -> dict:
        body: dict = {"success": False, "message": self.message}
        if self.field is not None:
            body["field"] = self.field
        return body


class NotFound(ZooCareError):
    status_code = 404


class ValidationError(ZooCareError):
    """Missing or malformed input, or a business rule violation."""

    status_code = 400


class Unauthorized(ZooCareError):
    status_code = 401


class Forbidden(ZooCareError):
    status_code = 403


class MalformedIdentifier(ZooCareError):
    status_code = 400


class ServerError(ZooCareError):
    status_code = 500


def check_identifier(value: str, field: str = "id") -> str:
    if not IDENTIFIER_RE.match(value or ""):
        raise MalformedIdentifier(f"Invalid {field}: {value!r}", field=field)
    return value

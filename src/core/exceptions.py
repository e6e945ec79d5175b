"""
Error taxonomy shared by the services and the HTTP boundary
"""


class FootfallError(Exception):
    """Base class for errors raised by the footfall core"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FootfallError):
    """Missing or invalid input, e.g. negative count or unknown status"""

    status_code = 400

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Collapse a pydantic ValidationError into a single readable message"""
        parts = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            parts.append(f"{field}: {error['msg']}" if field else error["msg"])
        return cls("; ".join(parts) or "Invalid input")


class NotFoundError(FootfallError):
    """Unknown sensor_id on read or status update"""

    status_code = 404


class StoreUnavailable(FootfallError):
    """The underlying store cannot be reached"""

    status_code = 503

    def __init__(self, message: str = "Store unavailable"):
        super().__init__(message)

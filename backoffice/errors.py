# backoffice/errors.py
from typing import List, Optional


class ServiceError(Exception):
    """Base class for failures the API reports as ``{"error": ...}``."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


# Missing or malformed field, bad numeric value, stock floor violation
class ValidationError(ServiceError):
    status_code = 400


# Duplicate reference / code / barcode / name
class ConflictError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ReferentialIntegrityError(ServiceError):
    """Delete refused because dependent rows still point at the entity."""

    status_code = 400

    def __init__(self, entity: str, blocking: List[str], message: Optional[str] = None):
        self.entity = entity
        self.blocking = list(blocking)
        if message is None:
            message = (
                f"Cannot delete {entity} with associated {', '.join(self.blocking)}. "
                "Please reassign or delete them first."
            )
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "blocking": self.blocking}


# Anything unexpected inside a unit of work; the transaction has been rolled back
class TransactionFailure(ServiceError):
    status_code = 500

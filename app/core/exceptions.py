from typing import Iterable, List


class PharmacyServiceError(Exception):
    """Base class for errors raised by the prescription workflow."""

    status_code = 400
    error = "Bad Request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PharmacyServiceError):
    status_code = 404
    error = "Not Found"

    def __init__(self, prescription_id: str):
        super().__init__(f"Prescription {prescription_id} not found")
        self.prescription_id = prescription_id


class ConflictError(PharmacyServiceError):
    status_code = 409
    error = "Conflict"


class ValidationError(PharmacyServiceError):
    """One or more rule violations; ``message`` is the newline-joined list."""

    status_code = 422
    error = "Validation Error"

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("\n".join(self.errors))

"""Service-layer exceptions.

Each carries the HTTP status and error code the API answers with.
"""

from __future__ import annotations


class HrPayrollError(Exception):
    """Base class for expected service failures."""

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(HrPayrollError):
    """Raised when a referenced record does not exist."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class DuplicateError(HrPayrollError):
    """Raised when a record would violate a uniqueness rule."""

    code = "DUPLICATE"


class NotApplicableError(HrPayrollError):
    """Raised when a salary structure does not cover an employee."""

    code = "NOT_APPLICABLE"


class InvalidInputError(HrPayrollError):
    """Raised for inputs that fail a presence or sanity check."""

    code = "INVALID_INPUT"


class InUseError(HrPayrollError):
    """Raised when deleting a record that others still reference."""

    code = "IN_USE"

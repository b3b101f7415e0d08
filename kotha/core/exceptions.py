"""
Domain errors for Kotha.

Services raise these; ``kotha.main`` renders them as ``{"detail": ...}``
with the status code carried by the exception class.
"""


class KothaError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIdentifierError(KothaError):
    """A path or query parameter is not a well-formed identifier."""
    status_code = 400


class InvalidFilterError(KothaError):
    status_code = 400


class InvalidReferenceError(KothaError):
    """A write refers to a row that does not exist."""
    status_code = 400


class DuplicateCategoryError(KothaError):
    status_code = 409


class SlugConflictError(KothaError):
    """The unique slug index kept rejecting freshly resolved slugs."""
    status_code = 409


class SlugExhaustedError(KothaError):
    """
    Every suffix up to the attempt cap was reported as taken.

    This points at a corrupt uniqueness index or a broken existence check
    rather than at bad input, so it is surfaced as a server error.
    """
    status_code = 500

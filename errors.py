# Domain error taxonomy; main.py maps each class to its HTTP status.


class FlashMathError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(FlashMathError):
    """Uploaded table could not be read as CSV."""

    status_code = 400


class ValidationError(FlashMathError):
    """A record fails its field constraints (bad level, empty name, ...)."""

    status_code = 422


class NotFound(FlashMathError):
    status_code = 404


class InvalidTransition(FlashMathError):
    """Operation not allowed in the current practice/session state."""

    status_code = 409


class PersistenceError(FlashMathError):
    """The database rejected a read or write."""

    status_code = 503

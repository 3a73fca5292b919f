"""Exception hierarchy for the listing import backend."""


class InmoError(Exception):
    """Base exception for all inmobiliaria errors."""


class ImportStructureError(InmoError):
    """Raised when an upload cannot be imported at all (bad file, wrong shape).

    Aborts the request before any row is processed.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def as_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class RowValidationError(InmoError):
    """Raised by field parsers when a single row cannot be normalized."""

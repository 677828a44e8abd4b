"""Error taxonomy for the store, record access and backup layers.

Everything raised to callers derives from :class:`FitxError` so the
presentation layer can catch one type and decide what to tell the user.
"""


class FitxError(Exception): ...


class StructuralError(FitxError):
    """A table-shape check, column add or seed step failed.

    ``ensure_schema`` logs and swallows these; they only surface in its report.
    """

    def __init__(self, step: str, reason: str):
        super().__init__(f"{step}: {reason}")
        self.step = step
        self.reason = reason


class QueryError(FitxError):
    """A CRUD or aggregate statement failed, or a stored blob could not be decoded."""


class NotFoundError(FitxError):
    """The store file, an import source or a requested row does not exist."""


class ExportError(FitxError):
    """The staging copy of the store file could not be written."""


class TransportError(FitxError):
    """A share target or the cloud drive rejected or failed a transfer."""


class ReplaceError(FitxError):
    """Replacing the live store file during import failed partway."""

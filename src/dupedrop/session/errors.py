"""Session management errors."""


class SessionError(Exception):
    """Base exception for working-set and session operations."""


class DuplicateIngestionRejected(SessionError):
    """Raised when an ingestion is requested while another one is running."""


class RecordNotFound(SessionError):
    """Raised when no kept record matches the requested path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No kept file with path {path!r}.")
        self.path = path

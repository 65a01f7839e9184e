"""Ingestion errors.

Per-file failures never escape the pipeline; they degrade the affected record
instead. Only a malformed batch is rejected as a whole.
"""


class IngestionError(Exception):
    """Base exception for ingestion failures."""


class UnreadableFile(IngestionError):
    """Raised when a file's byte content cannot be obtained."""


class PreviewDecodeFailure(IngestionError):
    """Raised when a readable file cannot be turned into a preview."""


class DuplicatePathError(IngestionError):
    """Raised when two files in one batch share the same relative path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"More than one file in the batch has path {path!r}.")
        self.path = path

"""File ingestion: fingerprinting, previews and duplicate classification."""

from .detectors import UNREADABLE_FINGERPRINT, HashComputer, TypeDetector
from .discovery import DirectoryScanner
from .errors import DuplicatePathError, IngestionError, PreviewDecodeFailure, UnreadableFile
from .models import FileRecord, LocalFile, MemoryFile, PreviewPayload, RawFile
from .pipeline import IngestionPipeline, classify_duplicates
from .previews import PreviewGenerator
from .progress import ProgressCallback, ProgressTracker

__all__ = [
    "UNREADABLE_FINGERPRINT",
    "HashComputer",
    "TypeDetector",
    "DirectoryScanner",
    "DuplicatePathError",
    "IngestionError",
    "PreviewDecodeFailure",
    "UnreadableFile",
    "FileRecord",
    "LocalFile",
    "MemoryFile",
    "PreviewPayload",
    "RawFile",
    "IngestionPipeline",
    "classify_duplicates",
    "PreviewGenerator",
    "ProgressCallback",
    "ProgressTracker",
]

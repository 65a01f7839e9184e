"""Turn selected folders and files into ingestion handles."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from .detectors import TypeDetector
from .models import LocalFile

LOGGER = logging.getLogger(__name__)


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


def _root_labels(roots: list[Path]) -> list[str]:
    """Return the shortest trailing-path label that is unique for each root."""
    parts = [
        [part for part in root.parts if part != root.anchor] or [root.anchor] for root in roots
    ]
    depths = [1] * len(roots)
    while True:
        labels = ["/".join(segments[-depth:]) for segments, depth in zip(parts, depths)]
        clashes = {label for label in labels if labels.count(label) > 1}
        if not clashes:
            return labels
        grown = False
        for index, label in enumerate(labels):
            if label in clashes and depths[index] < len(parts[index]):
                depths[index] += 1
                grown = True
        if not grown:
            return [
                f"{index}-{label}" if label in clashes else label
                for index, label in enumerate(labels)
            ]


class DirectoryScanner:
    """Enumerate files below a selection the way a browser folder picker does.

    Files found under a folder get ``<folder name>/<relative path>`` as their
    path; a directly selected file uses its bare name. When two selections
    share a name, parent folders are prepended until the labels differ.
    Entries are yielded in sorted path order so the assignment order is
    reproducible.
    """

    def __init__(
        self,
        *,
        recursive: bool,
        include_hidden: bool,
        detector: TypeDetector | None = None,
    ) -> None:
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.detector = detector or TypeDetector()

    def scan(self, root: Path, label: str | None = None) -> Iterator[LocalFile]:
        """Yield handles for files under ``root`` (or ``root`` itself if a file).

        ``label`` replaces the folder (or file) name as the first path segment.
        """
        root = root.expanduser()
        if not root.exists():
            LOGGER.warning("Selection %s does not exist; skipping.", root)
            return

        label = label or root.resolve().name
        if root.is_file():
            handle = self._handle(root, label)
            if handle is not None:
                yield handle
            return

        for path in sorted(self._iter_paths(root)):
            if not path.is_file():
                continue
            relative = path.relative_to(root)
            if not self.include_hidden and _is_hidden(relative):
                continue
            handle = self._handle(path, f"{label}/{relative.as_posix()}")
            if handle is not None:
                yield handle

    def scan_all(self, roots: Iterable[Path]) -> list[LocalFile]:
        """Return handles for every selection, in selection order.

        Repeated selections are scanned once, and a file reachable from two
        selections is only kept the first time. Selections sharing a name are
        labelled with as many parent folders as it takes to tell them apart, so
        every handle path in the batch is unique.
        """
        unique: list[Path] = []
        for root in roots:
            root = root.expanduser()
            if not root.exists():
                LOGGER.warning("Selection %s does not exist; skipping.", root)
                continue
            resolved = root.resolve()
            if resolved in unique:
                LOGGER.info("Selection %s was given more than once; scanning it once.", root)
                continue
            unique.append(resolved)

        handles: list[LocalFile] = []
        seen: set[Path] = set()
        for root, label in zip(unique, _root_labels(unique)):
            for handle in self.scan(root, label):
                if handle.source in seen:
                    LOGGER.debug("Skipping %s; already selected.", handle.source)
                    continue
                seen.add(handle.source)
                handles.append(handle)
        return handles

    def _handle(self, path: Path, relative: str) -> LocalFile | None:
        try:
            stat = path.stat()
        except OSError as exc:
            LOGGER.warning("Cannot stat %s: %s", path, exc)
            return None
        return LocalFile(
            source=path,
            path=relative,
            size=stat.st_size,
            media_type=self.detector.detect(path),
            last_modified=int(stat.st_mtime * 1000),
        )

    def _iter_paths(self, root: Path) -> Iterable[Path]:
        if self.recursive:
            return root.rglob("*")
        return root.iterdir()


__all__ = ["DirectoryScanner"]

"""Scoped temporary storage for uploaded audio."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from src.ingestion.models import UploadArtifact

logger = logging.getLogger(__name__)


def _safe_suffix(filename: str) -> str:
    suffix = Path(filename).suffix
    return suffix.lower() if suffix[1:].isalnum() else ""


@contextmanager
def temporary_upload(
    raw: bytes,
    filename: str,
    content_type: str,
    directory: str | Path | None = None,
) -> Iterator[UploadArtifact]:
    """Write ``raw`` to a fresh temp file and delete it when the block exits.

    Each call gets its own generated path, so concurrent uploads never share a
    file. The file is removed on every exit path; an error while removing it
    propagates rather than being swallowed.
    """
    if directory is not None:
        Path(directory).mkdir(parents=True, exist_ok=True)

    fd, name = tempfile.mkstemp(prefix="upload-", suffix=_safe_suffix(filename), dir=directory)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(raw)
        logger.debug("Stored upload %s (%d bytes) at %s", filename, len(raw), path)
        yield UploadArtifact(path=path, filename=filename, content_type=content_type)
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Removed upload %s", path)

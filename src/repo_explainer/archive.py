"""ZIP archive extraction and scoped handling of uploaded archives."""

from __future__ import annotations

import io
import uuid
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import ArchiveError, PerFileDecodeError
from .filters import is_content_admissible, is_path_admissible
from .logging import get_logger

logger = get_logger("archive")


def extract_files_from_zip(data: bytes) -> dict[str, str]:
    """Return ``{path: text}`` for every admissible file in a ZIP archive.

    Entries are visited in archive order. An entry that fails to decode is
    logged and skipped; only an unreadable archive aborts the run.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
        logger.error("Error processing zip file: %s", e)
        raise ArchiveError(f"Failed to process zip file: {e}") from e

    files: dict[str, str] = {}
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            path = info.filename
            if not is_path_admissible(path):
                continue
            try:
                content = _read_text(archive, info)
            except PerFileDecodeError as e:
                logger.warning("Error extracting file: %s", e)
                continue
            if is_content_admissible(content):
                files[path] = content

    logger.debug("Extracted %d admissible files from archive", len(files))
    return files


def _read_text(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> str:
    try:
        raw = archive.read(info)
    except (zipfile.BadZipFile, NotImplementedError, RuntimeError, OSError) as e:
        raise PerFileDecodeError(info.filename, str(e)) from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PerFileDecodeError(info.filename, str(e)) from e


def save_upload(data: bytes, filename: str, upload_dir: Path) -> Path:
    """Write an uploaded archive under ``upload_dir`` with a unique name."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(filename).suffix or ".zip"
    path = upload_dir / f"repository-{uuid.uuid4().hex}{suffix}"
    path.write_bytes(data)
    return path


def cleanup_upload(path: Path) -> None:
    """Best-effort removal of a saved upload; failures are logged, never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Error cleaning up temp file %s: %s", path, e)


@contextmanager
def scoped_upload(data: bytes, filename: str, upload_dir: Path) -> Iterator[Path]:
    """Save an upload for the duration of a request and always try to remove it."""
    path = save_upload(data, filename, upload_dir)
    try:
        yield path
    finally:
        cleanup_upload(path)

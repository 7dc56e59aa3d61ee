"""
content/files.py -- Disk storage for uploaded photos and documents.

Files land in Settings.upload_dir under a generated name:
    <epoch-ms>-<8 hex chars>-<sanitized original name>
and are served by the /uploads static mount (see asgi.py). The original name
is kept only as a readable suffix; path separators and anything outside
[A-Za-z0-9._-] are replaced, so a client cannot choose where the file lands.

Limits:
  Size   -- each file is read up to max_bytes + 1; anything larger is rejected
            before it touches the disk (413).
  Format -- the extension must belong to the expected kind (415).
"""

import logging
import re
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from fastapi import UploadFile

logger = logging.getLogger("clubsite.content")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LENGTH = 100


class FileKind(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"


_ALLOWED_EXTENSIONS: dict[FileKind, frozenset[str]] = {
    FileKind.IMAGE: frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"}),
    FileKind.DOCUMENT: frozenset({".pdf", ".doc", ".docx", ".odt"}),
}


class UploadRejected(Exception):
    """An upload failed a size or format check. Carries the HTTP mapping."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


@dataclass(frozen=True)
class StoredFile:
    url: str  # public URL, e.g. /uploads/1700000000000-1a2b3c4d-photo.png
    original_name: str


def sanitize_filename(name: str) -> str:
    """Reduce a client-supplied filename to a safe, non-empty basename."""
    base = Path(name.replace("\\", "/")).name
    safe = _UNSAFE_CHARS.sub("_", base).strip("._")
    return safe[-_MAX_NAME_LENGTH:] or "upload"


class UploadStorage:
    """Writes uploads to a directory and hands back their public URLs.

    Usage:
        storage = UploadStorage(Path("uploads"), max_bytes=5 * 1024 * 1024)
        stored = await storage.save(upload, FileKind.IMAGE)
        stored.url  # "/uploads/..."
    """

    def __init__(self, root: Path, max_bytes: int, url_prefix: str = "/uploads") -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes
        self.url_prefix = url_prefix.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def check_format(self, filename: str, kind: FileKind) -> None:
        """Raise UploadRejected (415) unless filename has an extension allowed for kind."""
        suffix = Path(filename).suffix.lower()
        allowed = _ALLOWED_EXTENSIONS[kind]
        if suffix not in allowed:
            raise UploadRejected(
                415,
                "unsupported_format",
                f"File must be one of: {', '.join(sorted(allowed))}",
            )

    async def _read_checked(self, upload: UploadFile, kind: FileKind) -> bytes:
        self.check_format(upload.filename or "", kind)
        raw = await upload.read(self.max_bytes + 1)
        if len(raw) > self.max_bytes:
            raise UploadRejected(
                413,
                "file_too_large",
                f"Each upload must be {self.max_bytes // 1024} KB or smaller.",
            )
        return raw

    def _write(self, original: str, raw: bytes) -> StoredFile:
        stored_name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{sanitize_filename(original)}"
        (self.root / stored_name).write_bytes(raw)
        logger.info("Stored upload %s (%d bytes)", stored_name, len(raw))
        return StoredFile(url=f"{self.url_prefix}/{stored_name}", original_name=original)

    async def save(self, upload: UploadFile, kind: FileKind) -> StoredFile:
        """Validate and write one upload. Raises UploadRejected on size or format."""
        raw = await self._read_checked(upload, kind)
        return self._write(upload.filename or "", raw)

    async def save_all(self, uploads: list[UploadFile], kind: FileKind) -> list[StoredFile]:
        """Read and check every upload, then write them in order.

        Nothing is written until the whole batch has passed both the format
        and the size check.
        """
        for upload in uploads:
            self.check_format(upload.filename or "", kind)
        payloads = [(upload.filename or "", await self._read_checked(upload, kind)) for upload in uploads]
        return [self._write(original, raw) for original, raw in payloads]

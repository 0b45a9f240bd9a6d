"""Filesystem storage for uploaded documents."""

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class StoredDocument:
    filename: str
    url: str
    path: Path


def _safe_segment(value: str, fallback: str) -> str:
    cleaned = _UNSAFE.sub("", value or "")
    return cleaned or fallback


class LocalDocumentStore:
    """
    Writes documents under a public uploads directory.

    Filenames follow {documentType}_{ownerId}_{timestamp}.{ext} with a
    millisecond timestamp; when no owner is known a random suffix takes
    its place. Only [A-Za-z0-9_-] survive in the type and owner segments.
    """

    def __init__(self, root: Path, url_prefix: str):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def build_filename(self, document_type: str, owner_id: Optional[str], extension: str) -> str:
        timestamp = int(time.time() * 1000)
        owner = _safe_segment(owner_id or "", secrets.token_hex(6))
        kind = _safe_segment(document_type, "document")
        return f"{kind}_{owner}_{timestamp}.{extension}"

    async def save(
        self,
        content: bytes,
        document_type: str,
        owner_id: Optional[str],
        extension: str,
    ) -> StoredDocument:
        """
        Save document bytes and return where they can be fetched.

        Args:
            content: Raw file bytes
            document_type: Kind of document (e.g. "nationalId")
            owner_id: User the document belongs to, if known
            extension: File extension without the dot
        """
        await aiofiles.os.makedirs(self.root, exist_ok=True)

        filename = self.build_filename(document_type, owner_id, extension)
        file_path = self.root / filename

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(content)

        logger.info(
            f"Stored document {filename}",
            extra={"document_type": document_type, "size": len(content)},
        )
        return StoredDocument(
            filename=filename,
            url=f"{self.url_prefix}/{filename}",
            path=file_path,
        )

    async def delete(self, document: StoredDocument) -> None:
        """Remove a stored document; a file that is already gone is ignored."""
        try:
            await aiofiles.os.remove(document.path)
        except FileNotFoundError:
            return
        logger.info(f"Removed document {document.filename}")

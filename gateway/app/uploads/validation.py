"""
Upload validation.

Checks MIME type and size of an uploaded file and returns its bytes.
Failures raise GatewayError(400) with a message naming the constraint.
"""

from typing import Iterable, Optional

from fastapi import status
from starlette.datastructures import UploadFile

from ..errors import GatewayError

DOCUMENT_TYPES = frozenset({"image/jpeg", "image/png", "image/jpg", "application/pdf"})

INVALID_DOCUMENT_TYPE = "Invalid file type. Only JPEG, PNG, and PDF files are allowed."
DOCUMENT_TOO_LARGE = "File size too large. Maximum size is 5MB."
NOT_AN_IMAGE = "File must be an image"
IMAGE_TOO_LARGE = "Image size must be less than 5MB"


def _content_type(upload: UploadFile) -> str:
    return (upload.content_type or "").split(";")[0].strip().lower()


async def _read_bounded(upload: UploadFile, max_bytes: int, too_large: str) -> bytes:
    # Reject on the declared size before reading anything
    if upload.size is not None and upload.size > max_bytes:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, too_large)

    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, too_large)
    return content


async def read_document(
    upload: UploadFile,
    max_bytes: int,
    allowed_types: Iterable[str] = DOCUMENT_TYPES,
) -> bytes:
    """Validate a document upload (JPEG, PNG or PDF) and return its content."""
    if _content_type(upload) not in set(allowed_types):
        raise GatewayError(status.HTTP_400_BAD_REQUEST, INVALID_DOCUMENT_TYPE)
    return await _read_bounded(upload, max_bytes, DOCUMENT_TOO_LARGE)


async def read_image(upload: UploadFile, max_bytes: int) -> bytes:
    """Validate an image upload (any image/* type) and return its content."""
    if not _content_type(upload).startswith("image/"):
        raise GatewayError(status.HTTP_400_BAD_REQUEST, NOT_AN_IMAGE)
    return await _read_bounded(upload, max_bytes, IMAGE_TOO_LARGE)


def file_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    """Extension (without dot) taken from the filename, else from the MIME type."""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
        if ext.isalnum():
            return ext

    return {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "application/pdf": "pdf",
    }.get((content_type or "").lower(), "bin")

"""
Image hosting client (Cloudinary upload API over httpx).

Uploads are signed with the Cloudinary SDK's request signer; the
upload itself goes through the shared async httpx client.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import httpx
from cloudinary.utils import api_sign_request

from ..config import Settings

logger = logging.getLogger(__name__)

VARIANT_TRANSFORMS = {
    "thumbnail": "w_150,h_150,c_fill",
    "medium": "w_400,h_300,c_fill",
    "large": "w_800,h_600,c_fill",
}


class ImageUploadError(Exception):
    """Raised when the image host rejects or fails an upload."""


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: str


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Cloudinary request signature over the params to be sent."""
    return api_sign_request(params, api_secret)


def image_variants(url: str) -> Dict[str, str]:
    """Derive resized variants by inserting a transformation after /upload/."""
    variants = {"original": url}
    for name, transform in VARIANT_TRANSFORMS.items():
        variants[name] = url.replace("/upload/", f"/upload/{transform}/", 1)
    return variants


class CloudinaryUploader:
    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings

    async def upload(self, image: ImageFile, folder: str) -> Dict[str, Any]:
        """
        Upload one image and describe it for the frontend.

        Returns:
            {url, publicId, variants: {original, thumbnail, medium, large}}

        Raises:
            ImageUploadError: If the host answers with an error or no URL
        """
        params = {"folder": folder, "timestamp": int(time.time())}
        data = {
            **{key: str(value) for key, value in params.items()},
            "api_key": self._settings.CLOUDINARY_API_KEY,
            "signature": sign_params(params, self._settings.CLOUDINARY_API_SECRET),
        }

        try:
            response = await self._client.post(
                self._settings.cloudinary_upload_url,
                data=data,
                files={"file": (image.filename, image.content, image.content_type)},
            )
        except httpx.HTTPError as e:
            raise ImageUploadError(f"Image host unreachable: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.is_success:
            error = result.get("error") if isinstance(result, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            raise ImageUploadError(message or f"Image upload failed with status {response.status_code}")

        url = result.get("secure_url")
        if not url:
            raise ImageUploadError("Image host returned no URL")

        logger.info("Uploaded image", extra={"public_id": result.get("public_id"), "folder": folder})
        return {
            "url": url,
            "publicId": result.get("public_id"),
            "variants": image_variants(url),
        }

    async def upload_many(self, images: Sequence[ImageFile], folder: str) -> List[Dict[str, Any]]:
        """Upload all images concurrently; the first failure fails the batch."""
        return list(await asyncio.gather(*(self.upload(image, folder) for image in images)))

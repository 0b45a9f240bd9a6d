"""
Upload Routes
=============

Endpoints:
----------
- POST /api/upload/service-images:     bulk image upload to the image host
- POST /api/upload/documents:          document upload for the signed-in user
- POST /api/upload/provider-documents: provider document upload, recorded on the backend
- POST /api/upload/profile-picture:    profile picture relayed to the backend

All bodies are multipart forms. Validation failures are 400, missing
credentials 401, storage or backend failures 500.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException

from ..auth.tokens import user_id_from_claims, verify_access_token
from ..config import Settings
from ..dependencies import get_app_settings, get_backend_client, get_storage_client
from ..errors import GatewayError, error_response
from ..proxy.credentials import extract_bearer_token
from ..proxy.forwarder import backend_message
from .images import CloudinaryUploader, ImageFile, ImageUploadError
from .storage import LocalDocumentStore
from .validation import file_extension, read_document, read_image

logger = logging.getLogger(__name__)

uploads_router = APIRouter(tags=["uploads"])


# ============================================================================
# Helpers
# ============================================================================

async def _parse_form(request: Request) -> FormData:
    try:
        return await request.form()
    except MultiPartException as e:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, f"Invalid form data: {e.message}")


def _form_file(form: FormData, field: str) -> Optional[UploadFile]:
    value = form.get(field)
    return value if isinstance(value, UploadFile) else None


def _form_text(form: FormData, field: str) -> Optional[str]:
    value = form.get(field)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def get_document_store(settings: Settings = Depends(get_app_settings)) -> LocalDocumentStore:
    return LocalDocumentStore(settings.UPLOADS_DIR, settings.UPLOADS_URL_PREFIX)


async def _store_document(
    form: FormData,
    store: LocalDocumentStore,
    settings: Settings,
    owner_id: Optional[str],
):
    document = _form_file(form, "document")
    document_type = _form_text(form, "documentType")
    if document is None or not document_type:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "Document and document type are required")

    content = await read_document(document, settings.MAX_UPLOAD_BYTES)
    extension = file_extension(document.filename, document.content_type)

    try:
        stored = await store.save(content, document_type, owner_id, extension)
    except OSError as e:
        logger.error(f"Failed to write document: {e}", exc_info=True)
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload document")

    return stored, document_type


# ============================================================================
# Endpoints
# ============================================================================

@uploads_router.post("/service-images")
async def upload_service_images(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    storage_client: httpx.AsyncClient = Depends(get_storage_client),
) -> Dict[str, Any]:
    """
    Upload service images to the image host.

    Every file in the `images` field is validated, then all are uploaded
    concurrently. One failed upload fails the whole request.
    """
    verify_access_token(request.headers.get("authorization"), settings)

    form = await _parse_form(request)
    uploads = [value for value in form.getlist("images") if isinstance(value, UploadFile)]
    if not uploads:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "No images provided")

    images: List[ImageFile] = []
    for upload in uploads:
        content = await read_image(upload, settings.MAX_UPLOAD_BYTES)
        images.append(
            ImageFile(
                filename=upload.filename or "image",
                content=content,
                content_type=upload.content_type or "application/octet-stream",
            )
        )

    uploader = CloudinaryUploader(storage_client, settings)
    try:
        results = await uploader.upload_many(images, settings.IMAGE_UPLOAD_FOLDER)
    except ImageUploadError as e:
        logger.error(f"Image upload failed: {e}", extra={"count": len(images)})
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload images")

    logger.info("Service images uploaded", extra={"count": len(results)})
    return {
        "status": "success",
        "message": "Images uploaded successfully",
        "data": {"images": results},
    }


@uploads_router.post("/documents")
async def upload_document(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    store: LocalDocumentStore = Depends(get_document_store),
) -> Dict[str, Any]:
    claims = verify_access_token(request.headers.get("authorization"), settings)

    form = await _parse_form(request)
    stored, document_type = await _store_document(
        form, store, settings, user_id_from_claims(claims)
    )

    return {
        "success": True,
        "message": "Document uploaded successfully",
        "url": stored.url,
        "filename": stored.filename,
        "documentType": document_type,
    }


@uploads_router.post("/provider-documents")
async def upload_provider_document(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    store: LocalDocumentStore = Depends(get_document_store),
    backend_client: httpx.AsyncClient = Depends(get_backend_client),
) -> Dict[str, Any]:
    """
    Store a provider document and record its URL on the user.

    The backend call carries the caller's Authorization header when one is
    present. A rejected or failed backend call is a 500 and the stored file
    is removed again.
    """
    form = await _parse_form(request)
    user_id = _form_text(form, "userId")
    if not user_id:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "User ID is required")

    stored, document_type = await _store_document(form, store, settings, user_id)

    headers = {"Content-Type": "application/json"}
    authorization = request.headers.get("authorization")
    if authorization:
        headers["Authorization"] = authorization

    try:
        response = await backend_client.post(
            "/api/users/update-documents",
            json={"userId": user_id, "documentType": document_type, "documentUrl": stored.url},
            headers=headers,
        )
    except httpx.HTTPError as e:
        logger.error(f"Backend unreachable while recording document: {e}")
        await store.delete(stored)
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update user documents")

    if not response.is_success:
        logger.warning(
            "Backend rejected document update",
            extra={"status": response.status_code, "document_type": document_type},
        )
        await store.delete(stored)
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update user documents")

    return {
        "success": True,
        "message": "Document uploaded successfully",
        "url": stored.url,
        "filename": stored.filename,
        "documentType": document_type,
    }


@uploads_router.post("/profile-picture")
async def upload_profile_picture(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    backend_client: httpx.AsyncClient = Depends(get_backend_client),
):
    authorization = request.headers.get("authorization")
    if not extract_bearer_token(authorization):
        raise GatewayError(status.HTTP_401_UNAUTHORIZED, "Authorization required")

    form = await _parse_form(request)
    picture = _form_file(form, "profilePicture")
    if picture is None:
        raise GatewayError(status.HTTP_400_BAD_REQUEST, "No file provided")

    content = await read_image(picture, settings.MAX_UPLOAD_BYTES)

    try:
        response = await backend_client.post(
            "/api/provider/profile-picture",
            files={
                "profilePicture": (
                    picture.filename or "profile-picture",
                    content,
                    picture.content_type,
                )
            },
            headers={"Authorization": authorization},
        )
    except httpx.HTTPError as e:
        logger.error(f"Profile picture relay failed: {e}")
        raise GatewayError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload profile picture")

    if not response.is_success:
        return error_response(
            response.status_code,
            backend_message(response) or "Failed to upload profile picture",
        )

    try:
        data = response.json()
    except ValueError:
        raise GatewayError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Backend returned invalid JSON response"
        )

    return JSONResponse(status_code=response.status_code, content=data)

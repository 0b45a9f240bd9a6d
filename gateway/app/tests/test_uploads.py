"""
Unit Tests for Upload Routes
============================

Tests for gateway/app/uploads/

Test Coverage:
--------------
1. Bulk image upload (token check, concurrent uploads, variants, batch failure)
2. Document validation for both document routes (MIME allow-list, 5MB ceiling)
3. Local document storage and the provider-document backend notification
4. Profile picture relay

Run tests:
----------
    pytest gateway/app/tests/test_uploads.py -v
"""

import hashlib
import json
from pathlib import Path

import httpx
import pytest
from fastapi import status
from respx import MockRouter

from gateway.app.uploads.images import image_variants, sign_params
from gateway.app.uploads.storage import LocalDocumentStore
from gateway.app.uploads.validation import file_extension

from .conftest import BACKEND_URL, CLOUDINARY_UPLOAD_URL, make_token

FIVE_MB = 5 * 1024 * 1024
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def cloudinary_reply(request: httpx.Request) -> httpx.Response:
    """Answer like the image host, with a public id derived from the upload."""
    digest = hashlib.md5(request.content).hexdigest()[:10]
    public_id = f"solutil/services/{digest}"
    return httpx.Response(
        200,
        json={
            "public_id": public_id,
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/v1/{public_id}.jpg",
        },
    )


def image_files(count: int):
    return [
        ("images", (f"photo{i}.jpg", PNG_BYTES + bytes([i]), "image/jpeg"))
        for i in range(count)
    ]


# ============================================================================
# Service Images
# ============================================================================

class TestServiceImages:
    """Tests for POST /api/upload/service-images"""

    def test_three_images_return_three_entries(self, client, auth_headers, respx_mock: MockRouter):
        host = respx_mock.post(CLOUDINARY_UPLOAD_URL).mock(side_effect=cloudinary_reply)

        response = client.post(
            "/api/upload/service-images", files=image_files(3), headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "success"
        assert body["message"] == "Images uploaded successfully"

        images = body["data"]["images"]
        assert len(images) == 3
        assert host.call_count == 3
        for image in images:
            assert image["url"].startswith("https://res.cloudinary.com/demo/image/upload/")
            assert image["publicId"].startswith("solutil/services/")
            assert set(image["variants"]) == {"original", "thumbnail", "medium", "large"}
            assert image["variants"]["original"] == image["url"]
            assert "/upload/w_150,h_150,c_fill/" in image["variants"]["thumbnail"]

    def test_upload_is_signed_into_service_folder(self, client, auth_headers, respx_mock: MockRouter):
        host = respx_mock.post(CLOUDINARY_UPLOAD_URL).mock(side_effect=cloudinary_reply)

        client.post("/api/upload/service-images", files=image_files(1), headers=auth_headers)

        sent = host.calls.last.request.content
        assert b'name="folder"' in sent
        assert b"solutil/services" in sent
        assert b'name="signature"' in sent
        assert b'name="api_key"' in sent
        assert b"cloudinary-test-secret" not in sent

    def test_requires_token(self, client, respx_mock: MockRouter):
        response = client.post("/api/upload/service-images", files=image_files(1))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"status": "fail", "message": "No token provided"}
        assert respx_mock.calls.call_count == 0

    def test_rejects_token_signed_with_other_secret(self, client, respx_mock: MockRouter):
        forged = make_token(secret="another-secret-that-is-long-enough-123")

        response = client.post(
            "/api/upload/service-images",
            files=image_files(1),
            headers={"Authorization": f"Bearer {forged}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Invalid token"

    def test_requires_at_least_one_image(self, client, auth_headers, respx_mock: MockRouter):
        response = client.post(
            "/api/upload/service-images", data={"note": "no files"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "No images provided"

    def test_rejects_non_image(self, client, auth_headers, respx_mock: MockRouter):
        response = client.post(
            "/api/upload/service-images",
            files=[("images", ("notes.txt", b"hello", "text/plain"))],
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "File must be an image"
        assert respx_mock.calls.call_count == 0

    def test_one_failed_upload_fails_the_batch(self, client, auth_headers, respx_mock: MockRouter):
        replies = iter([
            cloudinary_reply,
            lambda request: httpx.Response(400, json={"error": {"message": "Invalid image file"}}),
            cloudinary_reply,
        ])
        respx_mock.post(CLOUDINARY_UPLOAD_URL).mock(
            side_effect=lambda request: next(replies)(request)
        )

        response = client.post(
            "/api/upload/service-images", files=image_files(3), headers=auth_headers
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"status": "error", "message": "Failed to upload images"}


def test_variants_rewrite_upload_segment():
    url = "https://res.cloudinary.com/demo/image/upload/v1/solutil/services/abc.jpg"

    assert image_variants(url) == {
        "original": url,
        "thumbnail": "https://res.cloudinary.com/demo/image/upload/w_150,h_150,c_fill/v1/solutil/services/abc.jpg",
        "medium": "https://res.cloudinary.com/demo/image/upload/w_400,h_300,c_fill/v1/solutil/services/abc.jpg",
        "large": "https://res.cloudinary.com/demo/image/upload/w_800,h_600,c_fill/v1/solutil/services/abc.jpg",
    }


def test_signature_covers_sorted_params():
    expected = hashlib.sha1(b"folder=solutil/services&timestamp=1700000000s3cret").hexdigest()

    assert sign_params({"timestamp": 1700000000, "folder": "solutil/services"}, "s3cret") == expected


@pytest.mark.parametrize(
    "filename,content_type,expected",
    [
        ("id.PDF", "application/pdf", "pdf"),
        ("scan.jpeg", "image/jpeg", "jpeg"),
        ("noext", "image/png", "png"),
        (None, "application/pdf", "pdf"),
    ],
)
def test_file_extension(filename, content_type, expected):
    assert file_extension(filename, content_type) == expected


# ============================================================================
# Document Validation (both document routes)
# ============================================================================

DOCUMENT_ROUTES = ["/api/upload/documents", "/api/upload/provider-documents"]


def document_form(route: str):
    form = {"documentType": "nationalId"}
    if route.endswith("provider-documents"):
        form["userId"] = "provider-7"
    return form


@pytest.mark.parametrize("route", DOCUMENT_ROUTES)
@pytest.mark.parametrize("content_type", ["text/plain", "image/gif", "application/zip"])
def test_document_mime_outside_allow_list_rejected(
    client, auth_headers, respx_mock: MockRouter, route, content_type
):
    response = client.post(
        route,
        files={"document": ("file.bin", b"payload", content_type)},
        data=document_form(route),
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "status": "fail",
        "message": "Invalid file type. Only JPEG, PNG, and PDF files are allowed.",
    }
    assert respx_mock.calls.call_count == 0


@pytest.mark.parametrize("route", DOCUMENT_ROUTES)
def test_document_over_five_mb_rejected(
    client, auth_headers, respx_mock: MockRouter, route, settings
):
    response = client.post(
        route,
        files={"document": ("big.pdf", b"0" * (FIVE_MB + 1), "application/pdf")},
        data=document_form(route),
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "File size too large. Maximum size is 5MB."
    assert not list(Path(settings.UPLOADS_DIR).glob("*"))


@pytest.mark.parametrize("route", DOCUMENT_ROUTES)
def test_document_exactly_five_mb_accepted(client, auth_headers, respx_mock: MockRouter, route):
    if route.endswith("provider-documents"):
        respx_mock.post(f"{BACKEND_URL}/api/users/update-documents").mock(
            return_value=httpx.Response(200, json={"success": True})
        )

    response = client.post(
        route,
        files={"document": ("big.pdf", b"0" * FIVE_MB, "application/pdf")},
        data=document_form(route),
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK


# ============================================================================
# Document Storage
# ============================================================================

class TestDocuments:
    """Tests for POST /api/upload/documents"""

    def test_stores_file_under_uploads_dir(self, client, auth_headers, settings):
        response = client.post(
            "/api/upload/documents",
            files={"document": ("license.pdf", b"%PDF-1.4 license", "application/pdf")},
            data={"documentType": "businessLicense"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["documentType"] == "businessLicense"
        assert body["filename"].startswith("businessLicense_user-123_")
        assert body["filename"].endswith(".pdf")
        assert body["url"] == f"/uploads/documents/{body['filename']}"

        stored = Path(settings.UPLOADS_DIR) / body["filename"]
        assert stored.read_bytes() == b"%PDF-1.4 license"

    def test_stored_document_is_served(self, client, auth_headers):
        response = client.post(
            "/api/upload/documents",
            files={"document": ("id.png", PNG_BYTES, "image/png")},
            data={"documentType": "nationalId"},
            headers=auth_headers,
        )

        served = client.get(response.json()["url"])

        assert served.status_code == status.HTTP_200_OK
        assert served.content == PNG_BYTES

    def test_requires_bearer_token(self, client):
        response = client.post(
            "/api/upload/documents",
            files={"document": ("id.pdf", b"%PDF", "application/pdf")},
            data={"documentType": "nationalId"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_requires_document_type(self, client, auth_headers):
        response = client.post(
            "/api/upload/documents",
            files={"document": ("id.pdf", b"%PDF", "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Document and document type are required"

    def test_document_type_cannot_escape_directory(self, client, auth_headers, settings):
        response = client.post(
            "/api/upload/documents",
            files={"document": ("id.pdf", b"%PDF", "application/pdf")},
            data={"documentType": "../../etc/passwd"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert "/" not in response.json()["filename"]
        assert (Path(settings.UPLOADS_DIR) / response.json()["filename"]).exists()


@pytest.mark.asyncio
async def test_store_delete_removes_file_and_tolerates_missing(tmp_path):
    store = LocalDocumentStore(tmp_path / "docs", "/uploads/documents")
    stored = await store.save(b"%PDF", "certificate", "provider-7", "pdf")
    assert stored.path.exists()

    await store.delete(stored)
    await store.delete(stored)

    assert not stored.path.exists()


class TestProviderDocuments:
    """Tests for POST /api/upload/provider-documents"""

    def test_stores_and_notifies_backend(self, client, respx_mock: MockRouter, settings):
        backend = respx_mock.post(f"{BACKEND_URL}/api/users/update-documents").mock(
            return_value=httpx.Response(200, json={"success": True})
        )

        response = client.post(
            "/api/upload/provider-documents",
            files={"document": ("cert.jpg", b"\xff\xd8\xff jpeg", "image/jpeg")},
            data={"documentType": "certificate", "userId": "provider-7"},
            headers={"Authorization": "Bearer provider-token"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["filename"].startswith("certificate_provider-7_")

        sent = backend.calls.last.request
        assert json.loads(sent.content) == {
            "userId": "provider-7",
            "documentType": "certificate",
            "documentUrl": body["url"],
        }
        assert sent.headers["Authorization"] == "Bearer provider-token"

    def test_backend_rejection_is_500(self, client, respx_mock: MockRouter, settings):
        respx_mock.post(f"{BACKEND_URL}/api/users/update-documents").mock(
            return_value=httpx.Response(404, json={"message": "User not found"})
        )

        response = client.post(
            "/api/upload/provider-documents",
            files={"document": ("cert.pdf", b"%PDF", "application/pdf")},
            data={"documentType": "certificate", "userId": "ghost"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"status": "error", "message": "Failed to update user documents"}
        assert not list(Path(settings.UPLOADS_DIR).glob("*"))

    def test_backend_unreachable_is_500(self, client, respx_mock: MockRouter, settings):
        respx_mock.post(f"{BACKEND_URL}/api/users/update-documents").mock(
            side_effect=httpx.ConnectError
        )

        response = client.post(
            "/api/upload/provider-documents",
            files={"document": ("cert.pdf", b"%PDF", "application/pdf")},
            data={"documentType": "certificate", "userId": "provider-7"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["message"] == "Failed to update user documents"
        assert not list(Path(settings.UPLOADS_DIR).glob("*"))

    def test_requires_user_id(self, client):
        response = client.post(
            "/api/upload/provider-documents",
            files={"document": ("cert.pdf", b"%PDF", "application/pdf")},
            data={"documentType": "certificate"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "User ID is required"


# ============================================================================
# Profile Picture
# ============================================================================

class TestProfilePicture:
    """Tests for POST /api/upload/profile-picture"""

    def test_relays_multipart_to_backend(self, client, respx_mock: MockRouter):
        backend = respx_mock.post(f"{BACKEND_URL}/api/provider/profile-picture").mock(
            return_value=httpx.Response(
                200, json={"success": True, "data": {"profilePicture": "/img/p.png"}}
            )
        )

        response = client.post(
            "/api/upload/profile-picture",
            files={"profilePicture": ("me.png", PNG_BYTES, "image/png")},
            headers={"Authorization": "Bearer provider-token"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["profilePicture"] == "/img/p.png"

        sent = backend.calls.last.request
        assert sent.headers["Authorization"] == "Bearer provider-token"
        assert sent.headers["Content-Type"].startswith("multipart/form-data")
        assert PNG_BYTES in sent.content

    def test_requires_token(self, client, respx_mock: MockRouter):
        response = client.post(
            "/api/upload/profile-picture",
            files={"profilePicture": ("me.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert respx_mock.calls.call_count == 0

    def test_rejects_non_image(self, client):
        response = client.post(
            "/api/upload/profile-picture",
            files={"profilePicture": ("cv.pdf", b"%PDF", "application/pdf")},
            headers={"Authorization": "Bearer provider-token"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "File must be an image"

    def test_rejects_large_image(self, client):
        response = client.post(
            "/api/upload/profile-picture",
            files={"profilePicture": ("me.png", b"0" * (FIVE_MB + 1), "image/png")},
            headers={"Authorization": "Bearer provider-token"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Image size must be less than 5MB"

    def test_backend_error_relayed(self, client, respx_mock: MockRouter):
        respx_mock.post(f"{BACKEND_URL}/api/provider/profile-picture").mock(
            return_value=httpx.Response(403, json={"message": "Providers only"})
        )

        response = client.post(
            "/api/upload/profile-picture",
            files={"profilePicture": ("me.png", PNG_BYTES, "image/png")},
            headers={"Authorization": "Bearer customer-token"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"status": "fail", "message": "Providers only"}

"""
e-Foncier Backend: Parcel Document Endpoint Tests
==================================================

What:  Multipart upload, listing and download of parcel documents.
How:   libmagic is replaced by a signature lookup on the leading bytes so
       the tests do not depend on the system library being installed.
"""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

from efoncier.config import settings
from efoncier.exceptions import FileStorageError
from efoncier.services.file_service import file_service

SIGNATURES = {
    b"%PDF": "application/pdf",
    b"\x89PNG": "image/png",
    b"\xff\xd8\xff": "image/jpeg",
}


def fake_detect(content: bytes) -> str:
    for prefix, mime in SIGNATURES.items():
        if content.startswith(prefix):
            return mime
    return "application/octet-stream"


@pytest.fixture(autouse=True)
def sniff_by_signature():
    with patch.object(file_service, "detect_mime_type", side_effect=fake_detect):
        yield


@pytest_asyncio.fixture
async def parcel(test_client, parcel_payload):
    response = await test_client.post("/api/parcels", json=parcel_payload)
    return response.json()


def stored_files(root: str):
    return [p for p in Path(root).rglob("*") if p.is_file()]


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_with_types(self, test_client, parcel, pdf_bytes, png_bytes, temp_storage):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[
                ("files", ("titre.pdf", pdf_bytes, "application/pdf")),
                ("files", ("plan.png", png_bytes, "image/png")),
            ],
            data={"types": ["Titre foncier", "Plan cadastral"]},
        )

        assert response.status_code == 201, response.text
        docs = response.json()
        assert [d["type"] for d in docs] == ["Titre foncier", "Plan cadastral"]
        assert [d["mime"] for d in docs] == ["application/pdf", "image/png"]
        assert docs[0]["original_name"] == "titre.pdf"
        assert docs[0]["file_path"].startswith(f"parcels/{parcel['id']}/")
        assert len(stored_files(temp_storage)) == 2

    @pytest.mark.asyncio
    async def test_missing_types_default_to_autre(self, test_client, parcel, jpeg_bytes):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[("files", ("photo.jpg", jpeg_bytes, "image/jpeg"))],
        )

        assert response.status_code == 201
        assert response.json()[0]["type"] == "Autre"

    @pytest.mark.asyncio
    async def test_no_files_is_400(self, test_client, parcel):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents", data={"types": ["Titre foncier"]}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Missing field: files"

    @pytest.mark.asyncio
    async def test_one_bad_file_rejects_whole_upload(self, test_client, parcel, pdf_bytes, temp_storage):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[
                ("files", ("titre.pdf", pdf_bytes, "application/pdf")),
                ("files", ("virus.exe", b"MZ\x90\x00", "application/octet-stream")),
            ],
        )

        assert response.status_code == 400
        assert "not supported" in response.json()["error"]
        assert stored_files(temp_storage) == []
        listed = await test_client.get(f"/api/parcels/{parcel['id']}/documents")
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_content_not_matching_extension_is_400(self, test_client, parcel, pdf_bytes):
        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[("files", ("scan.png", pdf_bytes, "image/png"))],
        )

        assert response.status_code == 400
        assert "does not match" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_oversized_file_is_400(self, test_client, parcel, pdf_bytes, monkeypatch):
        monkeypatch.setattr(settings, "max_file_size", 16)

        response = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[("files", ("titre.pdf", pdf_bytes, "application/pdf"))],
        )

        assert response.status_code == 400
        assert "exceeds maximum" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_storage_failure_is_500_and_cleans_up(self, test_client, parcel, pdf_bytes, temp_storage):
        original_store = file_service.store_file
        calls = []

        async def fail_on_second(content, subdir, extension):
            calls.append(extension)
            if len(calls) == 2:
                raise FileStorageError(message="Failed to save uploaded document. Please try again.")
            return await original_store(content, subdir, extension)

        with patch.object(file_service, "store_file", AsyncMock(side_effect=fail_on_second)):
            response = await test_client.post(
                f"/api/parcels/{parcel['id']}/documents",
                files=[
                    ("files", ("a.pdf", pdf_bytes, "application/pdf")),
                    ("files", ("b.pdf", pdf_bytes, "application/pdf")),
                ],
            )

        assert response.status_code == 500
        assert response.json()["code"] == "server_error"
        assert stored_files(temp_storage) == []

    @pytest.mark.asyncio
    async def test_unknown_parcel_is_404(self, test_client, pdf_bytes):
        response = await test_client.post(
            "/api/parcels/NOPE/documents",
            files=[("files", ("titre.pdf", pdf_bytes, "application/pdf"))],
        )

        assert response.status_code == 404


class TestListAndDownload:

    @pytest.mark.asyncio
    async def test_download_returns_stored_bytes(self, test_client, parcel, pdf_bytes):
        uploaded = await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[("files", ("titre.pdf", pdf_bytes, "application/pdf"))],
            data={"types": ["Titre foncier"]},
        )
        document = uploaded.json()[0]

        response = await test_client.get(document["download_url"])

        assert response.status_code == 200
        assert response.content == pdf_bytes
        assert response.headers["content-type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_list_by_reference(self, test_client, parcel, png_bytes):
        await test_client.post(
            f"/api/parcels/{parcel['id']}/documents",
            files=[("files", ("plan.png", png_bytes, "image/png"))],
        )

        response = await test_client.get(f"/api/parcels/{parcel['reference']}/documents")

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_download_unknown_document_is_404(self, test_client, parcel):
        response = await test_client.get(
            f"/api/parcels/{parcel['id']}/documents/00000000-0000-0000-0000-000000000000/file"
        )

        assert response.status_code == 404

import json

import httpx
import pytest

from app.storage.exceptions import ObjectExistsError, StorageRemoveError, StorageUploadError
from app.storage.supabase_adapter import SupabaseStorageAdapter

BASE_URL = "https://project.supabase.co"


def _adapter(handler) -> tuple[SupabaseStorageAdapter, list[httpx.Request]]:  # type: ignore[no-untyped-def]
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(recording_handler))
    adapter = SupabaseStorageAdapter(
        base_url=BASE_URL + "/",
        service_key="service-key",
        timeout_seconds=5,
        client=client,
    )
    return adapter, requests


class TestUpload:
    def test_posts_without_upsert_and_returns_public_url(self) -> None:
        adapter, requests = _adapter(lambda _req: httpx.Response(200, json={"Key": "x"}))

        url = adapter.upload("condition-documents", "L1/R1/w2.pdf", b"%PDF", "application/pdf")

        assert url == f"{BASE_URL}/storage/v1/object/public/condition-documents/L1/R1/w2.pdf"
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/storage/v1/object/condition-documents/L1/R1/w2.pdf"
        assert request.headers["x-upsert"] == "false"
        assert request.headers["authorization"] == "Bearer service-key"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["content-type"] == "application/pdf"
        assert request.headers["cache-control"] == "max-age=3600"
        assert request.content == b"%PDF"

    def test_duplicate_raises_object_exists(self) -> None:
        adapter, _ = _adapter(
            lambda _req: httpx.Response(
                400,
                json={
                    "statusCode": "409",
                    "error": "Duplicate",
                    "message": "The resource already exists",
                },
            )
        )
        with pytest.raises(ObjectExistsError):
            adapter.upload("condition-documents", "L1/R1/w2.pdf", b"%PDF", "application/pdf")

    def test_server_error_raises_upload_error(self) -> None:
        adapter, _ = _adapter(lambda _req: httpx.Response(500, json={"message": "boom"}))
        with pytest.raises(StorageUploadError, match="boom"):
            adapter.upload("condition-documents", "L1/R1/w2.pdf", b"%PDF", "application/pdf")

    def test_network_error_raises_upload_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        adapter, _ = _adapter(handler)
        with pytest.raises(StorageUploadError, match="unreachable"):
            adapter.upload("document-thumbnails", "L1/R1/thumb.jpg", b"jpg", "image/jpeg")


class TestRemove:
    def test_deletes_by_prefixes(self) -> None:
        adapter, requests = _adapter(lambda _req: httpx.Response(200, json=[]))

        adapter.remove("document-thumbnails", ["L1/R1/thumb_w2.jpg"])

        request = requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/storage/v1/object/document-thumbnails"
        assert json.loads(request.content) == {"prefixes": ["L1/R1/thumb_w2.jpg"]}

    def test_empty_list_makes_no_request(self) -> None:
        adapter, requests = _adapter(lambda _req: httpx.Response(200, json=[]))
        adapter.remove("document-thumbnails", [])
        assert requests == []

    def test_error_raises_remove_error(self) -> None:
        adapter, _ = _adapter(lambda _req: httpx.Response(403, json={"message": "denied"}))
        with pytest.raises(StorageRemoveError, match="denied"):
            adapter.remove("condition-documents", ["L1/R1/w2.pdf"])


class TestPathFromUrl:
    def test_extracts_decoded_path(self) -> None:
        adapter, _ = _adapter(lambda _req: httpx.Response(200))
        url = adapter.public_url("condition-documents", "L1/R1/my w2.pdf")
        assert adapter.path_from_url("condition-documents", url) == "L1/R1/my w2.pdf"

    def test_other_bucket_returns_none(self) -> None:
        adapter, _ = _adapter(lambda _req: httpx.Response(200))
        url = adapter.public_url("document-thumbnails", "L1/R1/thumb.jpg")
        assert adapter.path_from_url("condition-documents", url) is None

    def test_unrelated_url_returns_none(self) -> None:
        adapter, _ = _adapter(lambda _req: httpx.Response(200))
        assert adapter.path_from_url("condition-documents", "https://example.com/a.pdf") is None


class TestClose:
    def test_close_releases_http_client(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda _req: httpx.Response(200)))
        adapter = SupabaseStorageAdapter(
            base_url=BASE_URL, service_key="service-key", timeout_seconds=5, client=client
        )

        adapter.close()

        assert client.is_closed

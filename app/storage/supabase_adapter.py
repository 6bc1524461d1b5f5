from urllib.parse import quote, unquote, urlsplit

import httpx

from app.storage.base import BaseObjectStore
from app.storage.exceptions import ObjectExistsError, StorageRemoveError, StorageUploadError

_DUPLICATE_STATUS_CODES = frozenset({409})
_DUPLICATE_ERROR_NAMES = frozenset({"Duplicate", "duplicate", "409"})


class SupabaseStorageAdapter(BaseObjectStore):
    """Object storage on the Supabase Storage REST API, via httpx."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        timeout_seconds: int,
        cache_control_seconds: int = 3600,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._cache_control_seconds = cache_control_seconds
        self._auth_headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        try:
            response = self._client.post(
                f"{self._base_url}/storage/v1/object/{bucket}/{quote(path)}",
                content=data,
                headers={
                    **self._auth_headers,
                    "Content-Type": content_type,
                    "Cache-Control": f"max-age={self._cache_control_seconds}",
                    "x-upsert": "false",
                },
            )
        except httpx.HTTPError as exc:
            raise StorageUploadError(f"Upload to {bucket}/{path} failed: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            if _is_duplicate(response):
                raise ObjectExistsError(f"Object {bucket}/{path} already exists")
            raise StorageUploadError(f"Upload to {bucket}/{path} failed: {message}")
        return self.public_url(bucket, path)

    def remove(self, bucket: str, paths: list[str]) -> None:
        if not paths:
            return
        try:
            response = self._client.request(
                "DELETE",
                f"{self._base_url}/storage/v1/object/{bucket}",
                json={"prefixes": paths},
                headers=self._auth_headers,
            )
        except httpx.HTTPError as exc:
            raise StorageRemoveError(f"Remove from {bucket} failed: {exc}") from exc
        if response.is_error:
            raise StorageRemoveError(
                f"Remove from {bucket} failed: {_error_message(response)}"
            )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{quote(path)}"

    def path_from_url(self, bucket: str, url: str) -> str | None:
        marker = f"/storage/v1/object/public/{bucket}/"
        _, sep, tail = urlsplit(url).path.partition(marker)
        if not sep or not tail:
            return None
        return unquote(tail)

    def close(self) -> None:
        self._client.close()


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)


def _is_duplicate(response: httpx.Response) -> bool:
    if response.status_code in _DUPLICATE_STATUS_CODES:
        return True
    try:
        payload = response.json()
    except ValueError:
        return False
    if not isinstance(payload, dict):
        return False
    return (
        str(payload.get("error")) in _DUPLICATE_ERROR_NAMES
        or str(payload.get("statusCode")) == "409"
    )

from pathlib import Path
from urllib.parse import quote, unquote, urlsplit

from app.storage.base import BaseObjectStore
from app.storage.exceptions import (
    ObjectExistsError,
    StorageError,
    StorageRemoveError,
    StorageUploadError,
)


class LocalObjectStore(BaseObjectStore):
    """Stores objects on disk under ``{root}/{bucket}/{path}``.

    Public URLs are ``{public_base_url}/{bucket}/{path}``.
    """

    def __init__(self, root: Path, public_base_url: str) -> None:
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            raise ObjectExistsError(f"Object {bucket}/{path} already exists") from exc
        except OSError as exc:
            raise StorageUploadError(f"Upload to {bucket}/{path} failed: {exc}") from exc
        return self.public_url(bucket, path)

    def remove(self, bucket: str, paths: list[str]) -> None:
        for path in paths:
            try:
                self._resolve(bucket, path).unlink(missing_ok=True)
            except OSError as exc:
                raise StorageRemoveError(f"Remove {bucket}/{path} failed: {exc}") from exc

    def exists(self, bucket: str, path: str) -> bool:
        return self._resolve(bucket, path).is_file()

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base_url}/{bucket}/{quote(path)}"

    def path_from_url(self, bucket: str, url: str) -> str | None:
        prefix = urlsplit(f"{self._public_base_url}/{bucket}/").path
        url_path = urlsplit(url).path
        if not url_path.startswith(prefix) or url_path == prefix:
            return None
        return unquote(url_path[len(prefix):])

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_root = (self._root / bucket).resolve()
        target = (bucket_root / path).resolve()
        if not target.is_relative_to(bucket_root):
            raise StorageError(f"Path {path!r} escapes bucket {bucket!r}")
        return target

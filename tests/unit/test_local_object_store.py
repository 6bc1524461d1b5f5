from pathlib import Path

import pytest

from app.storage.exceptions import ObjectExistsError, StorageError
from app.storage.local_adapter import LocalObjectStore

BASE_URL = "http://files.test/public"


@pytest.fixture()
def store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path, BASE_URL)


class TestUpload:
    def test_writes_object_and_returns_public_url(
        self, store: LocalObjectStore, tmp_path: Path
    ) -> None:
        url = store.upload(
            "condition-documents", "L1/R1/w2_1_abc.pdf", b"%PDF", "application/pdf"
        )

        assert url == f"{BASE_URL}/condition-documents/L1/R1/w2_1_abc.pdf"
        assert (tmp_path / "condition-documents/L1/R1/w2_1_abc.pdf").read_bytes() == b"%PDF"

    def test_refuses_to_overwrite(self, store: LocalObjectStore, tmp_path: Path) -> None:
        store.upload("condition-documents", "L1/R1/a.pdf", b"first", "application/pdf")

        with pytest.raises(ObjectExistsError):
            store.upload("condition-documents", "L1/R1/a.pdf", b"second", "application/pdf")
        assert (tmp_path / "condition-documents/L1/R1/a.pdf").read_bytes() == b"first"

    def test_rejects_path_escaping_bucket(self, store: LocalObjectStore) -> None:
        with pytest.raises(StorageError):
            store.upload("condition-documents", "../../etc/passwd", b"x", "text/plain")


class TestRemove:
    def test_removes_object(self, store: LocalObjectStore) -> None:
        store.upload("document-thumbnails", "L1/R1/thumb_a.jpg", b"jpg", "image/jpeg")
        store.remove("document-thumbnails", ["L1/R1/thumb_a.jpg"])
        assert not store.exists("document-thumbnails", "L1/R1/thumb_a.jpg")

    def test_missing_object_is_not_an_error(self, store: LocalObjectStore) -> None:
        store.remove("document-thumbnails", ["L1/R1/missing.jpg"])


class TestUrls:
    def test_round_trips_path_with_spaces(self, store: LocalObjectStore) -> None:
        url = store.public_url("condition-documents", "L1/unassigned/my file.pdf")
        assert "my%20file.pdf" in url
        assert store.path_from_url("condition-documents", url) == "L1/unassigned/my file.pdf"

    def test_foreign_bucket_url_resolves_to_none(self, store: LocalObjectStore) -> None:
        url = store.public_url("document-thumbnails", "L1/R1/thumb_a.jpg")
        assert store.path_from_url("condition-documents", url) is None


def test_close_is_a_no_op(store: LocalObjectStore) -> None:
    store.close()
    url = store.upload("condition-documents", "L1/R1/w2.pdf", b"%PDF", "application/pdf")
    assert store.path_from_url("condition-documents", url) == "L1/R1/w2.pdf"

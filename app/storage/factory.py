from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseObjectStore
from app.storage.local_adapter import LocalObjectStore
from app.storage.supabase_adapter import SupabaseStorageAdapter


class ObjectStoreFactory:
    """Creates the configured object storage backend."""

    BACKENDS = ("supabase", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStore:
        backend = settings.storage_backend.lower()
        if backend == "supabase":
            if not settings.supabase_url:
                raise ValueError("supabase_url is required for storage_backend=supabase")
            return SupabaseStorageAdapter(
                base_url=settings.supabase_url,
                service_key=settings.supabase_service_key,
                timeout_seconds=settings.storage_timeout_seconds,
                cache_control_seconds=settings.storage_cache_control_seconds,
            )
        if backend == "local":
            return LocalObjectStore(
                root=Path(settings.local_storage_root),
                public_base_url=settings.local_storage_public_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )

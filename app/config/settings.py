from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "loan_documents"
    db_username: str = "loan_documents"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    storage_backend: str = "supabase"
    supabase_url: str = ""
    supabase_service_key: str = ""
    storage_timeout_seconds: int = 30
    storage_cache_control_seconds: int = 3600
    documents_bucket: str = "condition-documents"
    thumbnails_bucket: str = "document-thumbnails"
    local_storage_root: str = "/app/files"
    local_storage_public_url: str = "http://localhost:8000/files"

    pdf_engine: str = "pymupdf"
    upload_max_concurrency: int = 4
    max_upload_size_bytes: int = 10 * 1024 * 1024
    thumbnail_jpeg_quality: int = 80
    pdf_image_jpeg_quality: int = 92

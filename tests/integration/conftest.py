import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.storage.local_adapter import LocalObjectStore

_SCHEMA = """
CREATE TABLE IF NOT EXISTS condition_documents (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    loan_id text NOT NULL,
    document_name text NOT NULL,
    document_type text,
    description text,
    expiration_date date,
    status text NOT NULL,
    file_url text NOT NULL,
    thumbnail_url text,
    file_size bigint NOT NULL,
    mime_type text NOT NULL,
    original_filename text NOT NULL,
    page_count integer NOT NULL DEFAULT 1,
    created_by text,
    created_on timestamptz NOT NULL DEFAULT now()
);
CREATE TABLE IF NOT EXISTS document_condition_associations (
    document_id uuid NOT NULL REFERENCES condition_documents (id),
    condition_id text NOT NULL,
    PRIMARY KEY (document_id, condition_id)
);
"""


def _test_settings() -> Settings:
    return Settings(db_database=os.environ.get("DB_DATABASE", "loan_documents_test"))


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(_SCHEMA)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def loan_id(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A fresh loan id; every row created under it is removed afterwards."""
    loan = f"L-{uuid.uuid4().hex[:12]}"
    yield loan
    with db_conn.cursor() as cur:
        cur.execute(
            """
            DELETE FROM document_condition_associations
            WHERE document_id IN (SELECT id FROM condition_documents WHERE loan_id = %s)
            """,
            (loan,),
        )
        cur.execute("DELETE FROM condition_documents WHERE loan_id = %s", (loan,))
    db_conn.commit()


@pytest.fixture
def local_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path, "http://files.test")

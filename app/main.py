import argparse
import asyncio
import sys
from pathlib import Path

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.intake.models import SourceFile, UploadStatus
from app.intake.queue import build_upload_queue
from app.logging.logger import Log
from app.storage.base import BaseObjectStore
from app.storage.factory import ObjectStoreFactory


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="docintake",
        description="Ingest borrower documents into a loan file.",
    )
    parser.add_argument("--loan", required=True, help="Owning loan id")
    parser.add_argument("--condition", default=None, help="Condition (requirement) id")
    parser.add_argument("--created-by", default=None, help="Uploader identity")
    parser.add_argument("files", nargs="+", type=Path, help="Files to ingest")
    return parser.parse_args(argv)


def read_sources(paths: list[Path]) -> tuple[list[SourceFile], int]:
    """Load files from disk. Unreadable paths are logged and counted, not raised."""
    sources: list[SourceFile] = []
    unreadable = 0
    for path in paths:
        try:
            sources.append(SourceFile.from_path(path))
        except OSError as exc:
            unreadable += 1
            Log.error(f"{path}: cannot read file: {exc.strerror or exc}")
    return sources, unreadable


async def ingest(settings: Settings, args: argparse.Namespace, store: BaseObjectStore) -> int:
    """Run every readable file through the upload queue.

    Returns the number of files that were unreadable or ended in error.
    """
    sources, failures = read_sources(args.files)
    if not sources:
        return failures

    queue = build_upload_queue(
        settings,
        loan_id=args.loan,
        condition_id=args.condition,
        created_by=args.created_by,
        store=store,
    )
    queue.submit(sources)
    await queue.wait_idle()

    for item in queue.snapshot():
        if item.status == UploadStatus.COMPLETE and item.document is not None:
            Log.info(
                f"{item.source.name}: stored as document {item.document.id} "
                f"({item.document.page_count} page(s))"
            )
        else:
            failures += 1
            Log.error(f"{item.source.name}: {item.error}")
    return failures


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool and store -> ingest files."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    store: BaseObjectStore | None = None
    try:
        store = ObjectStoreFactory.create(settings)
        failures = asyncio.run(ingest(settings, args, store))
    finally:
        if store is not None:
            store.close()
        close_pool()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())

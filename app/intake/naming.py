"""Storage naming: unique filenames and bucket-relative object paths."""

import re
import secrets
import string
import time
from pathlib import PurePosixPath

UNASSIGNED_FOLDER = "unassigned"
THUMBNAIL_PREFIX = "thumb_"
THUMBNAIL_EXTENSION = ".jpg"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_TOKEN_LENGTH = 6


def replace_extension(filename: str, extension: str) -> str:
    """Swap the extension of ``filename`` (or append one if it has none)."""
    return f"{PurePosixPath(filename).stem}{extension}"


def generate_unique_filename(original_name: str) -> str:
    """Build ``{safe_base}_{epoch_ms}_{token}.{ext}`` from an uploaded name."""
    path = PurePosixPath(original_name)
    base = _UNSAFE_CHARS.sub("_", path.stem)
    timestamp = int(time.time() * 1000)
    token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(_TOKEN_LENGTH))
    return f"{base}_{timestamp}_{token}{path.suffix}"


def document_path(loan_id: str, condition_id: str | None, unique_filename: str) -> str:
    """Object path in the documents bucket: ``{loan}/{condition|unassigned}/{file}``."""
    folder = condition_id or UNASSIGNED_FOLDER
    return f"{loan_id}/{folder}/{unique_filename}"


def thumbnail_path(loan_id: str, condition_id: str | None, unique_filename: str) -> str:
    """Mirror of the document path with a ``thumb_`` prefix and ``.jpg`` extension."""
    thumb_name = THUMBNAIL_PREFIX + replace_extension(unique_filename, THUMBNAIL_EXTENSION)
    return document_path(loan_id, condition_id, thumb_name)

"""Upload helper for intake documents and photos.

Files go through Django's ``default_storage`` so the host project decides
where they live (local media, S3, ...). The caller only gets back a public URL
or ``None``.
"""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import PurePath
from typing import TYPE_CHECKING

from django.core.files.storage import default_storage
from django.db import models

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile

logger = logging.getLogger(__name__)


class UploadCategory(models.TextChoices):
    """Destination folders for intake uploads."""

    PHOTOS = "photos", "Photos"
    DOCUMENTS = "documents", "Documents"


def build_upload_name(original_name: str, category: str) -> str:
    """Return a collision-resistant storage path for an uploaded file.

    Args:
        original_name: The client-supplied filename; only its extension is kept.
        category: The :class:`UploadCategory` folder.

    Returns:
        A path like ``photos/1718000000000_k3j9x2.jpg``.
    """
    suffix = PurePath(original_name).suffix.lower()
    stamp = int(time.time() * 1000)
    return f"{category}/{stamp}_{secrets.token_hex(4)}{suffix}"


def upload_file(file: UploadedFile, category: str) -> str | None:
    """Store ``file`` under ``category`` and return its public URL.

    Args:
        file: The uploaded file object.
        category: One of :class:`UploadCategory`.

    Returns:
        The public URL, or ``None`` when the category is unknown or storage fails.
    """
    if category not in UploadCategory.values:
        logger.warning("Rejected upload to unknown category %r", category)
        return None

    name = build_upload_name(file.name or "upload", category)
    try:
        saved_name = default_storage.save(name, file)
        return default_storage.url(saved_name)
    except (OSError, NotImplementedError):
        logger.exception("Error uploading %s to %s", file.name, category)
        return None

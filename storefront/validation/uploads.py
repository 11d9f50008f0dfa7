"""
Upload validation - fail fast.

Unlike the rule sets, the first violated constraint is reported at once.
A multi-file batch is accepted or rejected as a whole.
"""

import logging
from typing import Any, Optional, Sequence

from storefront.core.config import settings
from storefront.core.exceptions import UploadError

logger = logging.getLogger(__name__)

IMAGE_TYPE_MESSAGE = "Only image files are allowed (JPEG, PNG, GIF, WebP)"


def _size_of(upload: Any) -> int:
    size = getattr(upload, "size", None)
    if size is not None:
        return size
    # Fall back to measuring the spooled file
    handle = upload.file
    position = handle.tell()
    handle.seek(0, 2)
    size = handle.tell()
    handle.seek(position)
    return size


def _max_size_mb() -> int:
    return settings.UPLOAD_MAX_FILE_SIZE // (1024 * 1024)


def validate_image(upload: Optional[Any]) -> Any:
    """
    Validate a single uploaded image (form field ``image``).

    Raises:
        UploadError: missing file, disallowed type or oversized file
    """
    if upload is None or not getattr(upload, "filename", None):
        raise UploadError("No file uploaded")

    if upload.content_type not in settings.UPLOAD_ALLOWED_TYPES:
        logger.info(f"Rejected upload {upload.filename}: type {upload.content_type}")
        raise UploadError(IMAGE_TYPE_MESSAGE)

    if _size_of(upload) > settings.UPLOAD_MAX_FILE_SIZE:
        raise UploadError(f"File size must be less than {_max_size_mb()}MB")

    return upload


def validate_images(uploads: Optional[Sequence[Any]]) -> Sequence[Any]:
    """
    Validate a batch of images (form field ``multipleImages``).

    The file count is checked before any per-file check.
    """
    files = [upload for upload in (uploads or []) if getattr(upload, "filename", None)]
    if not files:
        raise UploadError("No files uploaded")

    if len(files) > settings.UPLOAD_MAX_FILES:
        raise UploadError(f"Maximum {settings.UPLOAD_MAX_FILES} files allowed")

    for upload in files:
        if upload.content_type not in settings.UPLOAD_ALLOWED_TYPES:
            logger.info(f"Rejected batch: {upload.filename} has type {upload.content_type}")
            raise UploadError(IMAGE_TYPE_MESSAGE)

        if _size_of(upload) > settings.UPLOAD_MAX_FILE_SIZE:
            raise UploadError(f"Each file size must be less than {_max_size_mb()}MB")

    return files

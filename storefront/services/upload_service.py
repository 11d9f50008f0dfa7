"""
Upload Service - stores validated images under UPLOAD_DIR
"""

import secrets
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import aiofiles
import aiofiles.os

from storefront.core.config import settings
from storefront.core.exceptions import ErrorCode
from storefront.core.logging_config import get_logger
from storefront.schemas.common import ServiceResult

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadService:
    """Writes uploads to disk; validation happens before this is called"""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)

    def _target_name(self, original: str) -> str:
        suffix = Path(original or "").suffix.lower()
        return f"{secrets.token_hex(12)}{suffix}"

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning(f"Could not remove partial upload {path.name}")

    async def _write(self, upload: Any) -> Dict[str, Any]:
        """Stream one upload to disk; a file that fails mid-write is removed"""
        name = self._target_name(upload.filename)
        path = self.upload_dir / name
        size = 0

        await upload.seek(0)
        try:
            async with aiofiles.open(path, "wb") as f:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    await f.write(chunk)
        except OSError:
            await self._discard(path)
            raise

        return {
            "filename": name,
            "original_name": upload.filename,
            "mimetype": upload.content_type,
            "size": size,
            "url": f"{settings.UPLOAD_URL_PREFIX}/{name}",
        }

    async def save_files(self, uploads: Sequence[Any]) -> ServiceResult:
        """Save a whole batch or nothing"""
        saved: List[Dict[str, Any]] = []
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            for upload in uploads:
                saved.append(await self._write(upload))
        except OSError as exc:
            logger.log_error_with_context(exc, "upload_service.save_files")
            for stored in saved:
                await self._discard(self.upload_dir / stored["filename"])
            return ServiceResult.fail("Failed to save uploaded files", ErrorCode.STORE_ERROR.value)

        logger.info(f"Stored {len(saved)} uploaded file(s)")
        message = "File uploaded successfully" if len(saved) == 1 else "Files uploaded successfully"
        return ServiceResult.ok(message, saved)

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from uuid import UUID

from gagyebu.core.config import get_settings
from gagyebu.core.logging import get_logger

logger = get_logger(__name__)


class ReceiptStorageError(RuntimeError):
    """Raised when a receipt cannot be written or removed."""


class ReceiptValidationError(ValueError):
    """Raised when an upload is not an acceptable receipt image."""


class ReceiptTooLargeError(ReceiptValidationError):
    """Raised when an upload exceeds the size limit."""


@dataclass(frozen=True)
class StoredReceipt:
    path: str
    public_url: str


def _extension_from_filename(filename: str | None) -> str:
    if not filename or "." not in filename:
        return "jpg"
    return filename.rsplit(".", 1)[1].strip().lower() or "jpg"


class ReceiptStorage:
    """Receipt bucket on the local filesystem, served under a public prefix."""

    def __init__(self, base_dir: str | Path, public_base_url: str, max_upload_mb: int):
        self.base_dir = Path(base_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.max_upload_bytes = max(0, max_upload_mb) * 1024 * 1024

    def public_url_for(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    def path_from_public_url(self, url: str | None) -> str | None:
        prefix = f"{self.public_base_url}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix) :]

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ReceiptStorageError(f"Invalid receipt path '{path}'")
        return self.base_dir.joinpath(*relative.parts)

    def validate(self, *, content_type: str | None, size: int) -> None:
        if not content_type or not content_type.lower().startswith("image/"):
            raise ReceiptValidationError("Only image files can be uploaded as receipts.")
        if size == 0:
            raise ReceiptValidationError("Receipt file is empty.")
        if size > self.max_upload_bytes:
            raise ReceiptTooLargeError(
                f"Receipt file is too large. Limit is {self.max_upload_bytes // (1024 * 1024)} MB."
            )

    def save(
        self,
        *,
        data: bytes,
        filename: str | None,
        content_type: str | None,
        user_id: UUID,
        transaction_id: UUID | None = None,
    ) -> StoredReceipt:
        self.validate(content_type=content_type, size=len(data))
        extension = _extension_from_filename(filename)
        timestamp_ms = int(time.time() * 1000)
        path = f"{user_id}/{timestamp_ms}-{transaction_id or 'temp'}.{extension}"
        target = self._resolve(path)
        if target.exists():
            raise ReceiptStorageError(f"Receipt '{path}' already exists.")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("receipt_upload_failed", path=path, error=str(exc))
            raise ReceiptStorageError("Receipt upload failed.") from exc

        logger.info("receipt_uploaded", path=path, size=len(data))
        return StoredReceipt(path=path, public_url=self.public_url_for(path))

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("receipt_delete_failed", path=path, error=str(exc))
            raise ReceiptStorageError("Receipt delete failed.") from exc
        logger.info("receipt_deleted", path=path)


def get_receipt_storage() -> ReceiptStorage:
    settings = get_settings()
    return ReceiptStorage(
        base_dir=settings.receipt_storage_dir,
        public_base_url=settings.receipt_public_base_url,
        max_upload_mb=settings.receipt_max_upload_mb,
    )

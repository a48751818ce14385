"""
Upload handler – store the file, persist the record, build the public URL.
"""
from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol
from urllib.parse import quote

from app.errors import PersistenceError
from app.models.receipt import ReceiptModel
from app.pipeline.repository import ReceiptRepository
from app.pipeline.storage import LocalFileStore
from app.schemas import ReceiptOut, ReceiptStatus, ValidatedReceipt

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "uploads"


class ReceiptSink(Protocol):
    def add(self, record: ReceiptModel) -> ReceiptModel: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------

def partition(now: datetime) -> tuple[str, str]:
    """``(YYYY, MM)`` for the storage directory of an upload made at ``now``."""
    return f"{now.year:04d}", f"{now.month:02d}"


def filesystem_timestamp(now: datetime) -> str:
    """ISO-8601 UTC timestamp with ``:`` and ``.`` swapped for ``-``.

    >>> filesystem_timestamp(datetime(2024, 3, 1, 9, 15, 2, 123456, tzinfo=timezone.utc))
    '2024-03-01T09-15-02-123Z'
    """
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"


def stored_file_name(original_name: str, now: datetime, token: str | None = None) -> str:
    base = os.path.basename(original_name.replace("\\", "/")) or "receipt"
    token = token or uuid.uuid4().hex[:8]
    return f"{filesystem_timestamp(now)}-{token}_{base}"


def build_file_url(base_url: str, year: str, month: str, name: str) -> str:
    return f"{base_url.rstrip('/')}/{UPLOADS_PREFIX}/{year}/{month}/{quote(name)}"


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------

class UploadHandler:
    """Persist a validated submission.

    The file is written first, then the record. If the record cannot be
    saved the file is deleted again; when that delete also fails the file
    stays behind as an orphan and is only logged.
    """

    def __init__(
        self,
        store: LocalFileStore,
        repository: ReceiptRepository | ReceiptSink,
        base_url: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.repository = repository
        self.base_url = base_url
        self.clock = clock

    def handle(self, receipt: ValidatedReceipt) -> ReceiptOut:
        now = self.clock()
        year, month = partition(now)
        name = stored_file_name(receipt.file.filename, now)

        logger.info("Received file: %s -> %s", receipt.file.filename, name)
        path = self.store.save(year, month, name, receipt.file.content)

        record = ReceiptModel(
            id=str(uuid.uuid4()),
            file_path=str(path),
            file_name=name,
            employee_name=receipt.employee_name,
            department=receipt.department,
            purchase_date=receipt.purchase_date,
            vendor=receipt.vendor,
            amount=float(receipt.amount),
            payment_method=receipt.payment_method.value,
            category=receipt.category,
            project_code=receipt.project_code,
            description=receipt.description,
            upload_date=now,
            status=ReceiptStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        try:
            saved = self.repository.add(record)
        except PersistenceError:
            self.store.delete(path)
            raise

        out = ReceiptOut.model_validate(saved)
        return out.model_copy(
            update={"file_url": build_file_url(self.base_url, year, month, name)}
        )

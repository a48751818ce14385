"""
Unit tests for the upload handler: naming, layout, URL, compensation.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.errors import PersistenceError, StorageError
from app.pipeline import LocalFileStore, ReceiptRepository, UploadHandler
from app.pipeline.upload import (
    build_file_url,
    filesystem_timestamp,
    partition,
    stored_file_name,
)
from app.pipeline.validator import validate_submission
from app.schemas import ReceiptSubmission, UploadedFile
from tests.conftest import stored_files

BASE_URL = "https://receipts.example.com"
NOW = datetime(2024, 3, 1, 9, 15, 2, 123456, tzinfo=timezone.utc)


def _validated(filename="receipt.jpg", content=b"\xff\xd8\xffjpeg-bytes"):
    return validate_submission(
        ReceiptSubmission(
            employee_name=" Jane Doe ",
            department="Ops",
            purchase_date="2024-03-01",
            vendor="Staples",
            amount="42.50",
            payment_method="credit card",
            category="Supplies",
            project_code="P-100",
            file=UploadedFile(
                filename=filename,
                content_type="image/jpeg",
                size=len(content),
                content=content,
            ),
        )
    )


class InMemoryRepository:
    """Stands in for ReceiptRepository without a database."""

    def __init__(self, fail=False):
        self.records = []
        self.fail = fail

    def add(self, record):
        if self.fail:
            raise PersistenceError()
        self.records.append(record)
        return record


class BrokenStore(LocalFileStore):
    def save(self, year, month, name, content):
        raise StorageError()


# =====================================================================
# Naming helpers
# =====================================================================
class TestNaming:
    def test_partition_zero_pads_month(self):
        assert partition(NOW) == ("2024", "03")

    def test_filesystem_timestamp(self):
        ts = filesystem_timestamp(NOW)
        assert ts == "2024-03-01T09-15-02-123Z"
        assert ":" not in ts and "." not in ts

    def test_stored_name_embeds_original(self):
        name = stored_file_name("receipt.jpg", NOW, token="abcd1234")
        assert name == "2024-03-01T09-15-02-123Z-abcd1234_receipt.jpg"

    def test_stored_name_strips_directories(self):
        assert stored_file_name("../../etc/passwd", NOW).endswith("_passwd")
        assert stored_file_name("C:\\scans\\r.pdf", NOW).endswith("_r.pdf")

    def test_stored_names_differ_within_same_millisecond(self):
        assert stored_file_name("receipt.jpg", NOW) != stored_file_name("receipt.jpg", NOW)

    def test_build_file_url_strips_trailing_slash(self):
        assert (
            build_file_url(BASE_URL + "/", "2024", "03", "x_receipt.jpg")
            == f"{BASE_URL}/uploads/2024/03/x_receipt.jpg"
        )

    def test_build_file_url_quotes_name(self):
        url = build_file_url(BASE_URL, "2024", "03", "ts_my receipt#1.jpg")
        assert url == f"{BASE_URL}/uploads/2024/03/ts_my%20receipt%231.jpg"


# =====================================================================
# Handler
# =====================================================================
class TestUploadHandler:
    def test_stores_file_and_record(self, store, upload_root):
        repo = InMemoryRepository()
        handler = UploadHandler(store, repo, BASE_URL, clock=lambda: NOW)

        out = handler.handle(_validated())

        files = stored_files(upload_root)
        assert len(files) == 1
        assert files[0].parent == upload_root / "2024" / "03"
        assert files[0].read_bytes() == b"\xff\xd8\xffjpeg-bytes"

        record = repo.records[0]
        assert record.file_path == str(files[0])
        assert record.file_name == files[0].name
        assert record.employee_name == "Jane Doe"
        assert record.amount == 42.5
        assert record.payment_method == "credit card"
        assert record.project_code == "P-100"
        assert record.status == "pending"
        assert record.upload_date == NOW

        assert out.amount == 42.5
        assert out.file_url == f"{BASE_URL}/uploads/2024/03/{files[0].name}"
        assert out.file_url.endswith("_receipt.jpg")

    def test_twice_gives_two_files(self, store, upload_root):
        repo = InMemoryRepository()
        handler = UploadHandler(store, repo, BASE_URL, clock=lambda: NOW)
        a = handler.handle(_validated())
        b = handler.handle(_validated())
        assert a.id != b.id
        assert a.file_name != b.file_name
        assert len(stored_files(upload_root)) == 2

    def test_storage_failure_writes_no_record(self, upload_root):
        repo = InMemoryRepository()
        handler = UploadHandler(BrokenStore(upload_root), repo, BASE_URL)
        with pytest.raises(StorageError):
            handler.handle(_validated())
        assert repo.records == []

    def test_persistence_failure_removes_file(self, store, upload_root):
        handler = UploadHandler(store, InMemoryRepository(fail=True), BASE_URL)
        with pytest.raises(PersistenceError):
            handler.handle(_validated())
        assert stored_files(upload_root) == []

    def test_with_sqlalchemy_repository(self, store, db):
        handler = UploadHandler(store, ReceiptRepository(db), BASE_URL, clock=lambda: NOW)
        out = handler.handle(_validated())
        row = ReceiptRepository(db).get(out.id)
        assert row is not None
        assert row.vendor == "Staples"
        assert Decimal(str(row.amount)) == Decimal("42.5")


# =====================================================================
# Local file store
# =====================================================================
class TestLocalFileStore:
    def test_unwritable_root_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        with pytest.raises(StorageError):
            LocalFileStore(blocker).save("2024", "03", "a.jpg", b"x")

    def test_delete_missing_is_ok(self, store, upload_root):
        assert store.delete(upload_root / "nope.jpg") is True

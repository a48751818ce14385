"""
Error taxonomy for the upload pipeline.

Validation errors are caller-fixable and always raised before any write.
Storage and persistence errors are reported to clients as opaque failures.
"""
from __future__ import annotations

from typing import Optional

GENERIC_UPLOAD_FAILURE = "Failed to upload receipt"


class ReceiptError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.field:
            body["field"] = self.field
        return body


# ── Validation (400) ─────────────────────────────────────────────────────
class ValidationError(ReceiptError):
    code = "VALIDATION_ERROR"
    status_code = 400


class MissingFile(ValidationError):
    code = "MISSING_FILE"

    def __init__(self):
        super().__init__("No file uploaded")


class InvalidFileType(ValidationError):
    code = "INVALID_FILE_TYPE"

    def __init__(self, content_type: Optional[str]):
        super().__init__(
            "Invalid file type. Only JPEG, PNG, GIF, and PDF files are allowed."
        )
        self.content_type = content_type


class FileTooLarge(ValidationError):
    code = "FILE_TOO_LARGE"

    def __init__(self, max_size: int):
        super().__init__(
            f"File size too large. Maximum size is {max_size // (1024 * 1024)}MB."
        )
        self.max_size = max_size


class MissingField(ValidationError):
    code = "MISSING_FIELD"

    def __init__(self, field: str):
        super().__init__(f"{field} is required", field=field)


class InvalidAmount(ValidationError):
    code = "INVALID_AMOUNT"

    def __init__(self):
        super().__init__("Please enter a valid amount", field="amount")


class InvalidEnum(ValidationError):
    code = "INVALID_ENUM"

    def __init__(self, field: str, allowed: list[str]):
        super().__init__(
            f"{field} must be one of: {', '.join(allowed)}", field=field
        )
        self.allowed = allowed


class InvalidDate(ValidationError):
    code = "INVALID_DATE"

    def __init__(self, field: str):
        super().__init__(f"{field} must be a valid date", field=field)


# ── Lookup (404) ─────────────────────────────────────────────────────────
class ReceiptNotFound(ReceiptError):
    code = "RECEIPT_NOT_FOUND"
    status_code = 404

    def __init__(self, receipt_id: str):
        super().__init__("Receipt not found")
        self.receipt_id = receipt_id


# ── Server side (5xx) ────────────────────────────────────────────────────
class StorageError(ReceiptError):
    code = "STORAGE_ERROR"

    def __init__(self, message: str = GENERIC_UPLOAD_FAILURE):
        super().__init__(message)


class PersistenceError(ReceiptError):
    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str = GENERIC_UPLOAD_FAILURE):
        super().__init__(message)


class ConnectivityError(ReceiptError):
    code = "DATABASE_UNAVAILABLE"
    status_code = 503

"""
Pydantic v2 models for receipt submissions and API responses.

Inbound form values stay raw strings until the validator has looked at them;
outbound models are serialised with camelCase keys.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT_CARD = "credit card"
    DEBIT_CARD = "debit card"
    BANK_TRANSFER = "bank transfer"
    OTHER = "other"


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# Submission (before / after validation)
# ---------------------------------------------------------------------------

class UploadedFile(BaseModel):
    """The attached file as declared by the client."""
    filename: str
    content_type: Optional[str] = None
    size: int = Field(..., ge=0, description="Byte size of the upload")
    content: bytes = b""


class ReceiptSubmission(BaseModel):
    """Raw multipart form values; anything may be missing."""
    employee_name: Optional[str] = None
    department: Optional[str] = None
    purchase_date: Optional[str] = None
    vendor: Optional[str] = None
    amount: Optional[str] = None
    payment_method: Optional[str] = None
    category: Optional[str] = None
    project_code: Optional[str] = None
    description: Optional[str] = None
    file: Optional[UploadedFile] = None


class ValidatedReceipt(BaseModel):
    employee_name: str
    department: str
    purchase_date: date
    vendor: str
    amount: Decimal
    payment_method: PaymentMethod
    category: str
    project_code: Optional[str] = None
    description: Optional[str] = None
    file: UploadedFile


# ---------------------------------------------------------------------------
# API responses
# ---------------------------------------------------------------------------

class ReceiptOut(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    file_path: str
    file_name: str
    employee_name: str
    department: str
    purchase_date: date
    vendor: str
    amount: float
    payment_method: PaymentMethod
    category: str
    project_code: Optional[str] = None
    description: Optional[str] = None
    upload_date: datetime
    status: ReceiptStatus = ReceiptStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    file_url: str = ""


class UploadResponse(BaseModel):
    message: str = "Receipt uploaded successfully"
    receipt: ReceiptOut

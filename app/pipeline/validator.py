"""
Submission validator.

Checks run in a fixed order and the first failure is raised; nothing is
written anywhere until every check has passed.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from app.config import settings
from app.errors import (
    FileTooLarge,
    InvalidAmount,
    InvalidDate,
    InvalidEnum,
    InvalidFileType,
    MissingField,
    MissingFile,
)
from app.schemas import PaymentMethod, ReceiptSubmission, ValidatedReceipt

_PAYMENT_METHODS = [m.value for m in PaymentMethod]


def _required_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise MissingField(field)
    return cleaned


def _optional_text(value: Optional[str]) -> Optional[str]:
    cleaned = (value or "").strip()
    return cleaned or None


def parse_purchase_date(value: Optional[str]) -> date:
    raw = (value or "").strip()
    if not raw:
        raise MissingField("purchaseDate")
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidDate("purchaseDate")


def parse_amount(value: Optional[str]) -> Decimal:
    raw = (value or "").strip()
    if not raw:
        raise InvalidAmount()
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise InvalidAmount()
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount()
    # Stored as a float column; reject magnitudes that overflow it
    if not math.isfinite(float(amount)):
        raise InvalidAmount()
    return amount


def parse_payment_method(value: Optional[str]) -> PaymentMethod:
    raw = (value or "").strip()
    if not raw:
        raise MissingField("paymentMethod")
    try:
        return PaymentMethod(raw)
    except ValueError:
        raise InvalidEnum("paymentMethod", _PAYMENT_METHODS)


def validate_submission(
    submission: ReceiptSubmission,
    *,
    max_size: int = settings.MAX_UPLOAD_SIZE,
    allowed_types: Iterable[str] = tuple(settings.ALLOWED_CONTENT_TYPES),
) -> ValidatedReceipt:
    """Validate ``submission`` and return its cleaned form.

    Raises the first ``ValidationError`` encountered.
    """
    upload = submission.file
    if upload is None:
        raise MissingFile()
    if upload.content_type not in set(allowed_types):
        raise InvalidFileType(upload.content_type)
    if upload.size > max_size:
        raise FileTooLarge(max_size)

    employee_name = _required_text(submission.employee_name, "employeeName")
    department = _required_text(submission.department, "department")
    purchase_date = parse_purchase_date(submission.purchase_date)
    vendor = _required_text(submission.vendor, "vendor")
    amount = parse_amount(submission.amount)
    payment_method = parse_payment_method(submission.payment_method)
    category = _required_text(submission.category, "category")

    return ValidatedReceipt(
        employee_name=employee_name,
        department=department,
        purchase_date=purchase_date,
        vendor=vendor,
        amount=amount,
        payment_method=payment_method,
        category=category,
        project_code=_optional_text(submission.project_code),
        description=_optional_text(submission.description),
        file=upload,
    )

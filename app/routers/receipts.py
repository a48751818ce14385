"""
Receipt API endpoints.

POST /api/receipts        - multipart upload (form fields + ``receipt`` file)
GET  /api/receipts        - list / search receipts
GET  /api/receipts/{id}   - get one receipt
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import ReceiptNotFound
from app.models.receipt import ReceiptModel
from app.pipeline import (
    LocalFileStore,
    ReceiptRepository,
    UploadHandler,
    build_file_url,
    process_submission,
)
from app.schemas import ReceiptOut, ReceiptSubmission, UploadedFile, UploadResponse

logger = logging.getLogger(__name__)
router = APIRouter()


# ── Dependencies ─────────────────────────────────────────────────────────
def get_file_store() -> LocalFileStore:
    return LocalFileStore(settings.UPLOAD_DIR)


def get_repository(db: Session = Depends(get_db)) -> ReceiptRepository:
    return ReceiptRepository(db)


def get_upload_handler(
    store: LocalFileStore = Depends(get_file_store),
    repository: ReceiptRepository = Depends(get_repository),
) -> UploadHandler:
    return UploadHandler(store, repository, base_url=settings.base_url)


def _with_url(row: ReceiptModel) -> ReceiptOut:
    year, month = f"{row.upload_date.year:04d}", f"{row.upload_date.month:02d}"
    out = ReceiptOut.model_validate(row)
    return out.model_copy(
        update={"file_url": build_file_url(settings.base_url, year, month, row.file_name)}
    )


def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    # Browsers send an empty part with no filename when nothing was chosen
    if upload is None or not upload.filename:
        return None
    # One byte past the limit is enough to know it is too large
    content = upload.file.read(settings.MAX_UPLOAD_SIZE + 1)
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type,
        size=len(content),
        content=content,
    )


# ── POST /api/receipts ───────────────────────────────────────────────────
@router.post("/receipts", response_model=UploadResponse)
def upload_receipt(
    receipt: Optional[UploadFile] = File(None),
    employee_name: Optional[str] = Form(None, alias="employeeName"),
    department: Optional[str] = Form(None),
    purchase_date: Optional[str] = Form(None, alias="purchaseDate"),
    vendor: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    payment_method: Optional[str] = Form(None, alias="paymentMethod"),
    category: Optional[str] = Form(None),
    project_code: Optional[str] = Form(None, alias="projectCode"),
    description: Optional[str] = Form(None),
    handler: UploadHandler = Depends(get_upload_handler),
):
    submission = ReceiptSubmission(
        employee_name=employee_name,
        department=department,
        purchase_date=purchase_date,
        vendor=vendor,
        amount=amount,
        payment_method=payment_method,
        category=category,
        project_code=project_code,
        description=description,
        file=_read_upload(receipt),
    )
    logger.info(
        "Upload: employee=%s vendor=%s file=%s",
        employee_name,
        vendor,
        submission.file.filename if submission.file else None,
    )
    stored = process_submission(submission, handler)
    return UploadResponse(receipt=stored)


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=list[ReceiptOut])
def list_receipts(
    q: Optional[str] = Query(None, description="Free-text filter over name, vendor, category, description"),
    limit: int = Query(50, ge=1, le=500),
    repository: ReceiptRepository = Depends(get_repository),
):
    rows = repository.search(q=q, limit=limit)
    logger.info("Found %d receipts (q=%r)", len(rows), q)
    return [_with_url(r) for r in rows]


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=ReceiptOut)
def get_receipt(receipt_id: str, repository: ReceiptRepository = Depends(get_repository)):
    row = repository.get(receipt_id)
    if not row:
        logger.warning("Receipt not found: %s", receipt_id)
        raise ReceiptNotFound(receipt_id)
    return _with_url(row)

"""
SQLAlchemy model for receipt persistence.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Index, String, Text

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReceiptModel(Base):
    __tablename__ = "receipts"

    id = Column(String, primary_key=True)
    file_path = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    employee_name = Column(String, nullable=False)
    department = Column(String, nullable=False)
    purchase_date = Column(Date, nullable=False)
    vendor = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(String, nullable=False)  # cash, credit card, debit card, bank transfer, other
    category = Column(String, nullable=False)
    project_code = Column(String)
    description = Column(Text)
    upload_date = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, approved, rejected

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_receipts_text", "employee_name", "vendor", "description", "category"),
    )

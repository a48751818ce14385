"""
Receipt record persistence on top of a SQLAlchemy session.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import PersistenceError
from app.models.receipt import ReceiptModel

logger = logging.getLogger(__name__)

TEXT_SEARCH_COLUMNS = (
    ReceiptModel.employee_name,
    ReceiptModel.vendor,
    ReceiptModel.description,
    ReceiptModel.category,
)


class ReceiptRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, record: ReceiptModel) -> ReceiptModel:
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to save receipt %s", record.id)
            raise PersistenceError() from e
        logger.info("Receipt saved to database: %s", record.id)
        return record

    def get(self, receipt_id: str) -> Optional[ReceiptModel]:
        return self.db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id).first()

    def search(self, q: Optional[str] = None, limit: int = 50) -> list[ReceiptModel]:
        query = self.db.query(ReceiptModel)
        if q and q.strip():
            pattern = f"%{q.strip()}%"
            query = query.filter(or_(*(col.ilike(pattern) for col in TEXT_SEARCH_COLUMNS)))
        return (
            query.order_by(ReceiptModel.upload_date.desc())
            .limit(limit)
            .all()
        )

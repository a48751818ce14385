"""
Receipt upload pipeline.

validate submission → store file → persist record → build file URL.
"""
import logging

from app.pipeline.repository import ReceiptRepository
from app.pipeline.storage import LocalFileStore
from app.pipeline.upload import UploadHandler, build_file_url
from app.pipeline.validator import validate_submission
from app.schemas import ReceiptOut, ReceiptSubmission

logger = logging.getLogger(__name__)

__all__ = [
    "LocalFileStore",
    "ReceiptRepository",
    "UploadHandler",
    "build_file_url",
    "process_submission",
    "validate_submission",
]


def process_submission(
    submission: ReceiptSubmission, handler: UploadHandler
) -> ReceiptOut:
    """Validate ``submission`` and hand it to ``handler``.

    Validation errors propagate before anything is written.
    """
    logger.info("Pipeline start - validate")
    validated = validate_submission(submission)
    logger.info("Pipeline - store and persist")
    receipt = handler.handle(validated)
    logger.info("Pipeline done: %s", receipt.id)
    return receipt

from app.schemas.receipt import (  # noqa: F401
    PaymentMethod,
    ReceiptOut,
    ReceiptStatus,
    ReceiptSubmission,
    UploadedFile,
    UploadResponse,
    ValidatedReceipt,
)

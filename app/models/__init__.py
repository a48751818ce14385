from app.models.receipt import ReceiptModel  # noqa: F401

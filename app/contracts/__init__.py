from app.contracts.preview import (
    PreviewDetails,
    PreviewValidations,
    TransactionPreview,
    TransactionRequest,
)
from app.contracts.slippage import SlippageFees, SlippageQuote, SlippageRequest, SlippageResponse

__all__ = [
    "PreviewDetails",
    "PreviewValidations",
    "TransactionPreview",
    "TransactionRequest",
    "SlippageFees",
    "SlippageQuote",
    "SlippageRequest",
    "SlippageResponse",
]

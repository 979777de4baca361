"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class BidStage(str, Enum):
    """Lifecycle of one bid submission attempt."""
    RECEIVED = "RECEIVED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    APPLIED = "APPLIED"


class BidPaymentType(str, Enum):
    PAYPAL = "PAYPAL"
    CARD = "CARD"


class MessagePaymentMethod(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    PAYPAL = "paypal"

"""Status enumerations shared by storage, domain and API layers.

Product approval transitions are owned by the external QA workflow; the
engine only ever creates products in ``PENDING`` and QA rows in
``PENDING_DIGITAL_REVIEW``.
"""

from enum import Enum


class ApprovalStatus(str, Enum):
    """Product approval states (mirrors the ``products`` CHECK constraint)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RECLASSIFIED = "reclassified"

    @classmethod
    def values(cls) -> list[str]:
        """Get all status values.

        Returns:
            List of raw status strings.
        """
        return [status.value for status in cls]


class QAStatus(str, Enum):
    """QA assessment states. Only the initial one is written here."""

    PENDING_DIGITAL_REVIEW = "pending_digital_review"
    WAITING_FOR_SAMPLE = "waiting_for_sample"
    IN_QUALITY_REVIEW = "in_quality_review"
    ACTIVE_VERIFIED = "active_verified"
    FOR_REVISION = "for_revision"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    """POS payment methods, each toggled in the seller's POS settings."""

    CASH = "cash"
    CARD = "card"
    EWALLET = "ewallet"
    BANK_TRANSFER = "bank_transfer"


class ScanSource(str, Enum):
    """Where a barcode scan came from."""

    POS = "pos"
    INVENTORY = "inventory"
    RECEIVING = "receiving"
    MANUAL = "manual"

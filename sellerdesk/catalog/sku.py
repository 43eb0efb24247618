"""SKU derivation and allocation.

Two stages:

1. A *draft* SKU per combo, shown to the seller for editing. It is built
   from the product name and option values and is not unique on its own.
2. A *final* SKU computed at submission time: the first eight characters
   of the product id, a dash, and the sanitized draft (or seller-edited)
   text. The id prefix keeps SKUs apart across products without any
   cross-product coordination; collisions inside one product get a numeric
   suffix.
"""

import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import structlog

from sellerdesk.domain.exceptions import DuplicateSkuError
from sellerdesk.domain.value_objects import SENTINEL

if TYPE_CHECKING:
    from sellerdesk.catalog.composer import VariantDraft

logger = structlog.get_logger()

TOKEN_LENGTH = 5
PRODUCT_ID_PREFIX_LENGTH = 8
FALLBACK_PRODUCT_TOKEN = "ITEM"
BASE_SKU_SUFFIX = "BASE"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_WHITESPACE = re.compile(r"\s+")
_NOT_SKU_CHAR = re.compile(r"[^A-Z0-9-]")
_DASH_RUN = re.compile(r"-{2,}")


def clean_token(text: str | None) -> str:
    """Reduce text to an uppercase alphanumeric token of at most 5 characters.

    Args:
        text: Raw text (product name or option value).

    Returns:
        Cleaned token, possibly empty.
    """
    return _NON_ALNUM.sub("", text or "").upper()[:TOKEN_LENGTH]


def draft_sku(name_prefix: str | None, option1: str, option2: str) -> str:
    """Build the editable draft SKU for a combo.

    Sentinel (unused) dimensions are omitted, as are values that clean
    down to nothing.

    Args:
        name_prefix: Product name.
        option1: Dimension 1 value or sentinel.
        option2: Dimension 2 value or sentinel.

    Returns:
        Draft SKU such as ``"TSHIR-RED-XL"``.
    """
    parts = [clean_token(name_prefix) or FALLBACK_PRODUCT_TOKEN]
    for option in (option1, option2):
        if option and option != SENTINEL:
            token = clean_token(option)
            if token:
                parts.append(token)
    return "-".join(parts)


def base_sku(name_prefix: str | None) -> str:
    """Draft SKU of the synthesized base variant."""
    return f"{clean_token(name_prefix) or FALLBACK_PRODUCT_TOKEN}-{BASE_SKU_SUFFIX}"


def sanitize_sku(text: str | None) -> str:
    """Normalize seller-entered SKU text.

    Uppercases, turns whitespace runs into dashes, drops anything outside
    ``[A-Z0-9-]``, collapses dash runs and trims leading/trailing dashes.

    Args:
        text: Draft or seller-edited SKU.

    Returns:
        Sanitized SKU, possibly empty.
    """
    value = _WHITESPACE.sub("-", (text or "").strip().upper())
    value = _NOT_SKU_CHAR.sub("", value)
    value = _DASH_RUN.sub("-", value)
    return value.strip("-")


def sku_prefix(product_id: str) -> str:
    """First eight characters of the product id."""
    return product_id[:PRODUCT_ID_PREFIX_LENGTH]


class SkuAllocator:
    """Allocates final SKUs for one product's variants.

    Allocation is optimistic: candidates are checked against the SKUs
    already handed out for this product plus any ``reserved`` SKUs the
    storage layer reported, and a numeric suffix is appended on collision.
    The storage unique constraint stays the final arbiter.

    Example usage:
        allocator = SkuAllocator(max_attempts=10)
        skus = allocator.allocate(product_id, drafts)
    """

    def __init__(self, max_attempts: int = 10) -> None:
        """Initialize allocator.

        Args:
            max_attempts: Candidates tried per variant (the bare SKU plus
                ``max_attempts - 1`` suffixed ones) before giving up.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts

    def final_sku(self, product_id: str, sku_text: str, fallback: str) -> str:
        """Build the unsuffixed final SKU.

        Args:
            product_id: Owning product id.
            sku_text: Draft or seller-edited SKU.
            fallback: Token used when ``sku_text`` sanitizes to nothing.

        Returns:
            ``"<id prefix>-<sanitized sku>"``.
        """
        token = sanitize_sku(sku_text) or sanitize_sku(fallback) or FALLBACK_PRODUCT_TOKEN
        return f"{sku_prefix(product_id)}-{token}"

    def allocate(
        self,
        product_id: str,
        drafts: Sequence["VariantDraft"],
        reserved: Iterable[str] = (),
        name_prefix: str | None = None,
    ) -> list[str]:
        """Allocate one final SKU per draft, in draft order.

        Args:
            product_id: Owning product id.
            drafts: Variant drafts to allocate for.
            reserved: SKUs already taken in storage.
            name_prefix: Product name, used to rebuild a draft token when
                the seller blanked a SKU field.

        Returns:
            Final SKUs aligned with ``drafts``.

        Raises:
            DuplicateSkuError: If a draft exhausts its attempts.
        """
        taken = set(reserved)
        allocated: list[str] = []

        for draft in drafts:
            fallback = draft_sku(name_prefix, draft.option1, draft.option2)
            candidate = self.final_sku(product_id, draft.sku, fallback)
            sku = self._first_free(candidate, taken, draft.key)
            if sku != candidate:
                logger.info(
                    "SKU collision resolved with suffix",
                    product_id=product_id,
                    combo_key=draft.key,
                    requested=candidate,
                    allocated=sku,
                )
            taken.add(sku)
            allocated.append(sku)

        return allocated

    def _first_free(self, candidate: str, taken: set[str], combo: str) -> str:
        sku = candidate
        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                sku = f"{candidate}-{attempt}"
            if sku not in taken:
                return sku
        logger.warning(
            "SKU allocation exhausted",
            combo_key=combo,
            last_candidate=sku,
            attempts=self.max_attempts,
        )
        raise DuplicateSkuError(combo, sku, self.max_attempts)

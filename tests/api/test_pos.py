"""Tests for POS endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from sellerdesk.catalog.models import ProductVariant

SELLER_ID = "seller-1"


@pytest.fixture
async def shirt(make_product):
    """Shirt with Red/M (2 in stock) and Blue/M (5 in stock)."""
    return await make_product(
        SELLER_ID,
        "Shirt",
        [("ABCD1234-SHIRT-RED-M", "Red", "M", "120", 2), ("ABCD1234-SHIRT-BLUE-M", "Blue", "M", "100", 5)],
    )


async def _open_session(client: AsyncClient) -> str:
    response = await client.post(f"/sellers/{SELLER_ID}/pos/session")
    assert response.status_code == 201
    return response.json()["id"]


class TestPOSSettingsEndpoints:
    """Tests for GET/PUT /sellers/{seller_id}/pos/settings."""

    @pytest.mark.asyncio
    async def test_defaults_then_save(self, client: AsyncClient) -> None:
        """Unsaved sellers get defaults; saved settings are returned afterwards."""
        response = await client.get(f"/sellers/{SELLER_ID}/pos/settings")
        assert response.status_code == 200
        data = response.json()
        assert data["enable_tax"] is False
        assert Decimal(data["tax_rate"]) == Decimal("12")
        assert data["accepted_payment_methods"] == ["cash", "card", "ewallet"]

        data.update(enable_tax=True, tax_included_in_price=False, accepted_payment_methods=["cash"])
        saved = await client.put(f"/sellers/{SELLER_ID}/pos/settings", json=data)
        assert saved.status_code == 200

        reread = (await client.get(f"/sellers/{SELLER_ID}/pos/settings")).json()
        assert reread["enable_tax"] is True
        assert reread["tax_included_in_price"] is False
        assert reread["accepted_payment_methods"] == ["cash"]

    @pytest.mark.asyncio
    async def test_negative_tax_rate_rejected(self, client: AsyncClient) -> None:
        """Schema bounds are enforced."""
        response = await client.put(f"/sellers/{SELLER_ID}/pos/settings", json={"tax_rate": "-1"})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestPOSCartEndpoints:
    """Tests for POS session cart endpoints."""

    @pytest.mark.asyncio
    async def test_unknown_session(self, client: AsyncClient) -> None:
        """Unknown sessions return 404."""
        response = await client.get("/pos/sessions/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_add_lines_up_to_stock(self, client: AsyncClient, shirt) -> None:
        """Adding past the stock snapshot returns 409 and leaves the cart as is."""
        session_id = await _open_session(client)
        body = {"product_id": shirt.id, "color": "Red", "size": "M"}

        await client.post(f"/pos/sessions/{session_id}/lines", json=body)
        second = await client.post(f"/pos/sessions/{session_id}/lines", json=body)
        assert second.status_code == 200
        assert second.json()["lines"][0]["quantity"] == 2
        assert second.json()["lines"][0]["low_stock"] is True

        third = await client.post(f"/pos/sessions/{session_id}/lines", json=body)
        assert third.status_code == 409
        assert third.json()["error_code"] == "STOCK_LIMIT_EXCEEDED"

        current = (await client.get(f"/pos/sessions/{session_id}")).json()
        assert current["totals"]["item_count"] == 2

    @pytest.mark.asyncio
    async def test_exclusive_tax_totals(self, client: AsyncClient, shirt) -> None:
        """Totals add tax on top of the subtotal when prices exclude it."""
        await client.put(
            f"/sellers/{SELLER_ID}/pos/settings",
            json={"enable_tax": True, "tax_included_in_price": False},
        )
        session_id = await _open_session(client)
        red = {"product_id": shirt.id, "color": "Red", "size": "M"}
        blue = {"product_id": shirt.id, "color": "Blue", "size": "M"}
        await client.post(f"/pos/sessions/{session_id}/lines", json=red)
        await client.post(f"/pos/sessions/{session_id}/lines", json=red)
        response = await client.post(f"/pos/sessions/{session_id}/lines", json=blue)

        totals = response.json()["totals"]
        assert Decimal(totals["subtotal"]) == Decimal("340.00")
        assert Decimal(totals["tax"]) == Decimal("40.80")
        assert Decimal(totals["total"]) == Decimal("380.80")
        assert totals["tax_label"] == "VAT"

    @pytest.mark.asyncio
    async def test_update_and_remove_lines(self, client: AsyncClient, shirt) -> None:
        """Quantities clamp to stock; lines can be removed singly or all at once."""
        session_id = await _open_session(client)
        await client.post(
            f"/pos/sessions/{session_id}/lines",
            json={"product_id": shirt.id, "color": "Blue", "size": "M"},
        )
        await client.post(
            f"/pos/sessions/{session_id}/lines",
            json={"product_id": shirt.id, "color": "Red", "size": "M"},
        )
        blue_key = f"{shirt.id}-Blue-M"

        clamped = await client.patch(
            f"/pos/sessions/{session_id}/lines/{blue_key}", json={"delta": 10}
        )
        assert clamped.json()["lines"][0]["quantity"] == 5

        removed = await client.delete(f"/pos/sessions/{session_id}/lines/{blue_key}")
        assert [line["variant_key"] for line in removed.json()["lines"]] == [f"{shirt.id}-Red-M"]

        missing = await client.delete(f"/pos/sessions/{session_id}/lines/{blue_key}")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "CART_LINE_NOT_FOUND"

        cleared = await client.delete(f"/pos/sessions/{session_id}/lines")
        assert cleared.json()["lines"] == []


class TestPOSScanEndpoint:
    """Tests for POST /pos/sessions/{session_id}/scan."""

    @pytest.mark.asyncio
    async def test_scan_sku_adds_line(self, client: AsyncClient, shirt) -> None:
        """A lowercase SKU scan resolves and adds the variant."""
        session_id = await _open_session(client)

        response = await client.post(
            f"/pos/sessions/{session_id}/scan", json={"code": " abcd1234-shirt-blue-m "}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["lookup"]["is_found"] is True
        assert data["lookup"]["color"] == "Blue"
        assert data["added"] is True
        assert data["offer_quick_create"] is False
        assert data["session"]["lines"][0]["variant_key"] == f"{shirt.id}-Blue-M"

    @pytest.mark.asyncio
    async def test_scan_unknown_code(self, client: AsyncClient) -> None:
        """Unknown codes offer quick product creation."""
        session_id = await _open_session(client)

        response = await client.post(
            f"/pos/sessions/{session_id}/scan", json={"code": "UNKNOWN-123"}
        )

        data = response.json()
        assert data["lookup"]["is_found"] is False
        assert data["added"] is False
        assert data["offer_quick_create"] is True
        assert data["session"]["lines"] == []


class TestPOSCompleteEndpoint:
    """Tests for POST /pos/sessions/{session_id}/complete."""

    @pytest.mark.asyncio
    async def test_cash_sale(self, client: AsyncClient, session_factory, shirt) -> None:
        """A completed sale clears the cart and decrements stock."""
        session_id = await _open_session(client)
        await client.post(
            f"/pos/sessions/{session_id}/lines",
            json={"product_id": shirt.id, "color": "Blue", "size": "M"},
        )

        response = await client.post(
            f"/pos/sessions/{session_id}/complete",
            json={"payment_method": "cash", "note": "walk-in"},
        )

        assert response.status_code == 200
        receipt = response.json()
        assert receipt["payment_method"] == "cash"
        assert Decimal(receipt["total"]) == Decimal("100.00")
        assert receipt["note"] == "walk-in"

        current = (await client.get(f"/pos/sessions/{session_id}")).json()
        assert current["lines"] == []

        async with session_factory() as session:
            stock = (
                await session.execute(
                    select(ProductVariant.stock).where(
                        ProductVariant.sku == "ABCD1234-SHIRT-BLUE-M"
                    )
                )
            ).scalar_one()
        assert stock == 4

    @pytest.mark.asyncio
    async def test_disabled_payment_method(self, client: AsyncClient, shirt) -> None:
        """Methods the seller switched off are rejected and the cart is kept."""
        await client.put(
            f"/sellers/{SELLER_ID}/pos/settings", json={"accepted_payment_methods": ["cash"]}
        )
        session_id = await _open_session(client)
        await client.post(
            f"/pos/sessions/{session_id}/lines",
            json={"product_id": shirt.id, "color": "Blue", "size": "M"},
        )

        response = await client.post(
            f"/pos/sessions/{session_id}/complete", json={"payment_method": "card"}
        )

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "payment_method"
        current = (await client.get(f"/pos/sessions/{session_id}")).json()
        assert current["totals"]["item_count"] == 1

    @pytest.mark.asyncio
    async def test_empty_cart(self, client: AsyncClient) -> None:
        """Completing an empty cart is rejected."""
        session_id = await _open_session(client)

        response = await client.post(
            f"/pos/sessions/{session_id}/complete", json={"payment_method": "cash"}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "EMPTY_CART"

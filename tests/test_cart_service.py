"""
Tests for CartService against the in-memory document store.
"""
import pytest

from src.commonUtils.exceptions import (
    CartNotFound,
    EmptyCart,
    Forbidden,
    InvalidDiscountCode,
    ItemNotFound,
    SavedCartNotFound,
)
from src.crud.cartService import CartService
from src.crud.documentStore import DocumentStore
from src.models.cartModel import CartItem


def assert_totals_consistent(cart):
    assert cart.total_amount == pytest.approx(sum(item.quantity * item.unit_price for item in cart.items))
    assert cart.total_amount == pytest.approx(sum(item.total_price for item in cart.items))
    assert cart.final_amount == pytest.approx(cart.total_amount - cart.discount)


async def add(cart_service: CartService, user_id: str, product_id: str, quantity: int, unit_price: float):
    return await cart_service.add_item(
        user_id, product_id=product_id, sku=f"SKU-{product_id}", name=f"Product {product_id}",
        quantity=quantity, unit_price=unit_price
    )


@pytest.mark.asyncio
class TestGetAndCount:

    async def test_count_without_cart_is_zero_and_creates_nothing(self, cart_service, store: DocumentStore, user_id):
        assert await cart_service.count_items(user_id) == 0
        assert await store.carts.find_one(user_id) is None

    async def test_get_creates_and_persists_empty_cart(self, cart_service, store: DocumentStore, user_id):
        cart = await cart_service.get_or_create_cart(user_id)

        assert cart.id is not None
        assert cart.items == []
        assert cart.total_amount == 0
        assert cart.final_amount == 0
        assert (await store.carts.find_one(user_id)).id == cart.id

    async def test_get_is_idempotent(self, cart_service, user_id):
        first = await cart_service.get_or_create_cart(user_id)
        second = await cart_service.get_or_create_cart(user_id)

        assert first.id == second.id

    async def test_count_sums_quantities(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 2, 10.0)
        await add(cart_service, user_id, "p2", 3, 5.0)

        assert await cart_service.count_items(user_id) == 5


@pytest.mark.asyncio
class TestAddItem:

    async def test_totals_hold_after_every_add(self, cart_service, user_id):
        for product_id, quantity, unit_price in [
            ("p1", 1, 19.99), ("p2", 3, 4.5), ("p1", 2, 19.99), ("p3", 1, 0.0), ("p2", 1, 4.5),
        ]:
            cart = await add(cart_service, user_id, product_id, quantity, unit_price)
            assert_totals_consistent(cart)

        assert [item.product_id for item in cart.items] == ["p1", "p2", "p3"]

    async def test_re_adding_product_ignores_new_unit_price(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)

        cart = await add(cart_service, user_id, "p1", 2, 12.0)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert cart.items[0].unit_price == 10.0
        assert cart.items[0].total_price == 30.0
        assert cart.total_amount == 30.0

    async def test_add_keeps_existing_discount_amount(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 100.0)
        await cart_service.apply_discount(user_id, "SAVE10")

        cart = await add(cart_service, user_id, "p2", 1, 50.0)

        assert cart.discount == pytest.approx(10.0)
        assert cart.final_amount == pytest.approx(140.0)


@pytest.mark.asyncio
class TestUpdateAndRemove:

    async def test_update_without_cart_raises(self, cart_service, user_id):
        with pytest.raises(CartNotFound):
            await cart_service.update_item_quantity(user_id, "p1", 2)

    async def test_update_unknown_item_raises(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)

        with pytest.raises(ItemNotFound):
            await cart_service.update_item_quantity(user_id, "nope", 2)

    async def test_update_sets_exact_quantity(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 5, 10.0)

        cart = await cart_service.update_item_quantity(user_id, "p1", 2)

        assert cart.items[0].quantity == 2
        assert cart.items[0].total_price == 20.0
        assert_totals_consistent(cart)

    @pytest.mark.parametrize("quantity", [0, -3])
    async def test_update_to_zero_or_less_removes_item(self, cart_service, user_id, quantity):
        await add(cart_service, user_id, "p1", 1, 10.0)
        await add(cart_service, user_id, "p2", 1, 5.0)

        cart = await cart_service.update_item_quantity(user_id, "p1", quantity)

        assert [item.product_id for item in cart.items] == ["p2"]
        assert cart.total_amount == 5.0

    async def test_remove_item(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)
        await add(cart_service, user_id, "p2", 2, 5.0)

        cart = await cart_service.remove_item(user_id, "p2")

        assert [item.product_id for item in cart.items] == ["p1"]
        assert_totals_consistent(cart)

    async def test_remove_absent_item_is_noop(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)

        cart = await cart_service.remove_item(user_id, "missing")

        assert len(cart.items) == 1

    async def test_remove_without_cart_raises(self, cart_service, user_id):
        with pytest.raises(CartNotFound):
            await cart_service.remove_item(user_id, "p1")


@pytest.mark.asyncio
class TestDiscount:

    async def test_apply_without_cart_raises(self, cart_service, user_id):
        with pytest.raises(CartNotFound):
            await cart_service.apply_discount(user_id, "SAVE10")

    async def test_apply_and_remove(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 2, 50.0)

        cart = await cart_service.apply_discount(user_id, "welcome")
        assert cart.discount_code == "WELCOME"
        assert cart.discount == pytest.approx(15.0)
        assert cart.final_amount == pytest.approx(85.0)

        cart = await cart_service.remove_discount(user_id)
        assert cart.discount == 0
        assert cart.discount_code is None
        assert cart.final_amount == cart.total_amount

    async def test_invalid_code_does_not_touch_stored_cart(self, cart_service, store, user_id):
        await add(cart_service, user_id, "p1", 1, 40.0)
        before = await store.carts.find_one(user_id)

        with pytest.raises(InvalidDiscountCode):
            await cart_service.apply_discount(user_id, "FREESTUFF")

        assert await store.carts.find_one(user_id) == before

    async def test_injected_discount_table_is_used(self, store, user_id):
        cart_service = CartService(store, {"HALF": 0.5})
        await add(cart_service, user_id, "p1", 1, 40.0)

        cart = await cart_service.apply_discount(user_id, "half")

        assert cart.final_amount == pytest.approx(20.0)
        with pytest.raises(InvalidDiscountCode):
            await cart_service.apply_discount(user_id, "SAVE10")


@pytest.mark.asyncio
class TestValidateAndClear:

    async def test_validate_missing_cart(self, cart_service, user_id):
        with pytest.raises(EmptyCart):
            await cart_service.validate_cart(user_id)

    async def test_validate_empty_cart(self, cart_service, user_id):
        await cart_service.get_or_create_cart(user_id)

        with pytest.raises(EmptyCart):
            await cart_service.validate_cart(user_id)

    async def test_validate_reports_all_items_available(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)

        result = await cart_service.validate_cart(user_id)

        assert result == {"is_valid": True, "unavailable_items": []}

    async def test_clear_resets_everything(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 3, 10.0)
        await cart_service.apply_discount(user_id, "SAVE20")

        cart = await cart_service.clear_cart(user_id)

        assert cart.items == []
        assert cart.total_amount == 0
        assert cart.discount == 0
        assert cart.discount_code is None
        assert cart.final_amount == 0

    async def test_clear_without_cart_raises(self, cart_service, user_id):
        with pytest.raises(CartNotFound):
            await cart_service.clear_cart(user_id)


@pytest.mark.asyncio
class TestSavedCarts:

    async def test_save_empty_cart_raises(self, cart_service, user_id):
        with pytest.raises(EmptyCart):
            await cart_service.save_for_later(user_id)

    async def test_save_uses_default_name(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)

        saved_cart = await cart_service.save_for_later(user_id)

        assert saved_cart.id is not None
        assert saved_cart.name.startswith("Saved Cart ")
        assert saved_cart.total_amount == 10.0

    async def test_list_saved_newest_first(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)
        first = await cart_service.save_for_later(user_id, "first")
        second = await cart_service.save_for_later(user_id, "second")

        saved_carts = await cart_service.list_saved_carts(user_id)

        assert [saved_cart.id for saved_cart in saved_carts] == [second.id, first.id]

    async def test_restore_returns_snapshot_and_keeps_current_discount(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 2, 10.0)
        await add(cart_service, user_id, "p2", 1, 30.0)
        saved_cart = await cart_service.save_for_later(user_id, "weekend")

        await cart_service.update_item_quantity(user_id, "p1", 7)
        await add(cart_service, user_id, "p3", 1, 99.0)
        discounted = await cart_service.apply_discount(user_id, "SAVE10")

        cart = await cart_service.restore_saved_cart(user_id, saved_cart.id)

        assert [item.model_dump() for item in cart.items] == [item.model_dump() for item in saved_cart.items]
        assert cart.total_amount == saved_cart.total_amount == 50.0
        assert cart.discount == discounted.discount
        assert cart.discount_code == "SAVE10"
        assert cart.final_amount == pytest.approx(50.0 - discounted.discount)

    async def test_saved_snapshot_is_independent_of_live_cart(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)
        saved_cart = await cart_service.save_for_later(user_id)

        await cart_service.clear_cart(user_id)

        [stored] = await cart_service.list_saved_carts(user_id)
        assert stored.id == saved_cart.id
        assert len(stored.items) == 1

    async def test_restore_unknown_id(self, cart_service, user_id):
        with pytest.raises(SavedCartNotFound):
            await cart_service.restore_saved_cart(user_id, "64b7f0c2a1b2c3d4e5f6ffff")

    async def test_restore_and_delete_of_other_users_saved_cart_forbidden(
            self, cart_service, user_id, other_user_id
    ):
        await add(cart_service, other_user_id, "p1", 1, 10.0)
        saved_cart = await cart_service.save_for_later(other_user_id)
        await add(cart_service, user_id, "p9", 1, 1.0)

        with pytest.raises(Forbidden):
            await cart_service.restore_saved_cart(user_id, saved_cart.id)
        with pytest.raises(Forbidden):
            await cart_service.delete_saved_cart(user_id, saved_cart.id)

        assert len(await cart_service.list_saved_carts(other_user_id)) == 1

    async def test_delete_saved_cart(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)
        saved_cart = await cart_service.save_for_later(user_id)

        await cart_service.delete_saved_cart(user_id, saved_cart.id)

        assert await cart_service.list_saved_carts(user_id) == []
        with pytest.raises(SavedCartNotFound):
            await cart_service.delete_saved_cart(user_id, saved_cart.id)


@pytest.mark.asyncio
class TestMerge:

    async def test_merge_into_missing_cart(self, cart_service, user_id):
        cart = await cart_service.merge_guest_cart(user_id, [
            CartItem(product_id="p1", quantity=2, unit_price=3.0),
        ])

        assert cart.id is not None
        assert cart.items[0].total_price == 6.0
        assert_totals_consistent(cart)

    async def test_merge_sums_quantities_and_keeps_cart_price(self, cart_service, user_id):
        await add(cart_service, user_id, "p1", 1, 10.0)

        cart = await cart_service.merge_guest_cart(user_id, [
            CartItem(product_id="p1", quantity=2, unit_price=8.0),
            CartItem(product_id="p2", quantity=1, unit_price=4.0),
            CartItem(product_id="p2", quantity=1, unit_price=5.0),
        ])

        by_product = {item.product_id: item for item in cart.items}
        assert by_product["p1"].quantity == 3
        assert by_product["p1"].unit_price == 10.0
        assert by_product["p2"].quantity == 2
        assert by_product["p2"].unit_price == 4.0
        assert cart.total_amount == 38.0
        assert_totals_consistent(cart)

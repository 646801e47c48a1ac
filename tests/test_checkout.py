import asyncio
import unittest
from decimal import Decimal

from db.models import Medicine, PaymentDetails, ShippingInfo
from store.cart import Cart
from store.checkout import CheckoutMachine, CheckoutStep
from store.client import OrderConfirmation
from store.errors import SubmissionFailed

ASPIRIN = Medicine(1, "Aspirin", "Pain reliever", Decimal("5.00"), "aspirin.jpg")

SHIPPING = ShippingInfo("Jane Doe", "jane@example.com", "1 Main St", "Springfield", "12345")
PAYMENT = PaymentDetails("Jane Doe", "4111 1111 1111 1111", "12/30", "123")


class FakeStoreClient:
    """Stands in for StoreClient.submit_order, recording every call."""

    def __init__(self, fail_with: str = ""):
        self.fail_with = fail_with
        self.calls = []

    async def submit_order(self, shipping, cart, payment_method="card"):
        self.calls.append((shipping, cart.order_items(), cart.total(), payment_method))
        if self.fail_with:
            raise SubmissionFailed(self.fail_with)
        return OrderConfirmation(order_id=7, message="Order placed successfully")


class BlockingStoreClient(FakeStoreClient):
    """Holds every submission until `released` is set."""

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.released = asyncio.Event()

    async def submit_order(self, shipping, cart, payment_method="card"):
        self.started.set()
        await self.released.wait()
        return await super().submit_order(shipping, cart, payment_method)


class CheckoutTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.cart = Cart()
        self.client = FakeStoreClient()
        self.machine = CheckoutMachine(self.cart, self.client)

    async def _to_payment(self):
        self.cart.add(ASPIRIN)
        self.assertTrue(self.machine.proceed_to_shipping())
        self.assertEqual(self.machine.submit_shipping(SHIPPING), [])
        self.assertIs(self.machine.step, CheckoutStep.PAYMENT)

    def test_starts_at_cart(self):
        self.assertIs(self.machine.step, CheckoutStep.CART)

    def test_empty_cart_cannot_proceed(self):
        self.assertFalse(self.machine.proceed_to_shipping())
        self.assertIs(self.machine.step, CheckoutStep.CART)

    def test_blank_shipping_field_blocks_payment(self):
        self.cart.add(ASPIRIN)
        self.machine.proceed_to_shipping()

        info = ShippingInfo("Jane Doe", "jane@example.com", "   ", "Springfield", "")
        missing = self.machine.submit_shipping(info)

        self.assertEqual(missing, ["address", "zip_code"])
        self.assertIs(self.machine.step, CheckoutStep.SHIPPING)

    def test_email_format_is_not_checked(self):
        self.cart.add(ASPIRIN)
        self.machine.proceed_to_shipping()
        info = ShippingInfo("Jane", "not-an-email", "1 Main St", "Springfield", "x")
        self.assertEqual(self.machine.submit_shipping(info), [])
        self.assertIs(self.machine.step, CheckoutStep.PAYMENT)

    def test_shipping_only_accepted_on_shipping_step(self):
        self.assertIsNone(self.machine.submit_shipping(SHIPPING))
        self.assertEqual(self.machine.shipping, ShippingInfo())
        self.assertIs(self.machine.step, CheckoutStep.CART)

    async def test_back_moves_one_step(self):
        await self._to_payment()
        self.assertTrue(self.machine.back())
        self.assertIs(self.machine.step, CheckoutStep.SHIPPING)
        self.assertTrue(self.machine.back())
        self.assertIs(self.machine.step, CheckoutStep.CART)
        self.assertFalse(self.machine.back())
        self.assertIs(self.machine.step, CheckoutStep.CART)

    async def test_successful_order_reaches_confirmation(self):
        await self._to_payment()
        self.cart.add(ASPIRIN)

        confirmation = await self.machine.place_order(PAYMENT)

        self.assertEqual(confirmation.order_id, 7)
        self.assertIs(self.machine.step, CheckoutStep.CONFIRMATION)
        shipping, items, total, method = self.client.calls[0]
        self.assertEqual(shipping, SHIPPING)
        self.assertEqual([(i.id, i.quantity) for i in items], [(1, 2)])
        self.assertEqual(total, Decimal("10.00"))
        self.assertEqual(method, "card")

        # cart survives until the confirmation is closed
        self.assertFalse(self.cart.is_empty)
        self.assertFalse(self.machine.back())

        self.assertTrue(self.machine.close())
        self.assertIs(self.machine.step, CheckoutStep.CART)
        self.assertTrue(self.cart.is_empty)

    async def test_failed_order_stays_on_payment(self):
        self.client.fail_with = "Database error: disk on fire"
        await self._to_payment()

        with self.assertRaises(SubmissionFailed) as ctx:
            await self.machine.place_order(PAYMENT)

        self.assertEqual(ctx.exception.message, "Database error: disk on fire")
        self.assertEqual(self.machine.last_error, "Database error: disk on fire")
        self.assertIs(self.machine.step, CheckoutStep.PAYMENT)
        self.assertEqual(self.cart.quantity_of(1), 1)

        # resubmission works once the server recovers
        self.client.fail_with = ""
        confirmation = await self.machine.place_order(PAYMENT)
        self.assertEqual(confirmation.order_id, 7)
        self.assertIsNone(self.machine.last_error)
        self.assertEqual(len(self.client.calls), 2)

    async def test_blank_payment_field_is_refused_without_submitting(self):
        await self._to_payment()
        payment = PaymentDetails("Jane Doe", "", "12/30", "123")

        self.assertIsNone(await self.machine.place_order(payment))
        self.assertIs(self.machine.step, CheckoutStep.PAYMENT)
        self.assertEqual(self.client.calls, [])

    async def test_cannot_order_from_other_steps(self):
        self.cart.add(ASPIRIN)
        self.assertIsNone(await self.machine.place_order(PAYMENT))
        self.machine.proceed_to_shipping()
        self.assertIsNone(await self.machine.place_order(PAYMENT))
        self.assertEqual(self.client.calls, [])
        self.assertIs(self.machine.step, CheckoutStep.SHIPPING)

    async def test_close_only_from_confirmation(self):
        await self._to_payment()
        self.assertFalse(self.machine.close())
        self.assertFalse(self.cart.is_empty)

    async def test_cancel_keeps_cart_and_shipping(self):
        await self._to_payment()
        self.machine.cancel()
        self.assertIs(self.machine.step, CheckoutStep.CART)
        self.assertFalse(self.cart.is_empty)
        self.assertEqual(self.machine.shipping, SHIPPING)

    async def test_step_is_frozen_while_order_is_in_flight(self):
        client = BlockingStoreClient()
        self.machine.client = client
        await self._to_payment()

        pending = asyncio.create_task(self.machine.place_order(PAYMENT))
        await client.started.wait()
        self.assertTrue(self.machine.submitting)

        self.assertFalse(self.machine.cancel())
        self.assertFalse(self.machine.back())
        self.assertIsNone(await self.machine.place_order(PAYMENT))
        self.assertIs(self.machine.step, CheckoutStep.PAYMENT)

        client.released.set()
        confirmation = await pending

        self.assertEqual(confirmation.order_id, 7)
        self.assertFalse(self.machine.submitting)
        self.assertIs(self.machine.step, CheckoutStep.CONFIRMATION)
        self.assertEqual(len(client.calls), 1)

    async def test_failed_submission_releases_the_step(self):
        self.client.fail_with = "Nope"
        await self._to_payment()

        with self.assertRaises(SubmissionFailed):
            await self.machine.place_order(PAYMENT)

        self.assertFalse(self.machine.submitting)
        self.assertTrue(self.machine.cancel())
        self.assertIs(self.machine.step, CheckoutStep.CART)

"""Tests for payment-status checkers and UPI helpers."""
import pytest
from contextlib import asynccontextmanager
from datetime import date
from aiohttp import web
from aiohttp import test_utils
from luxestays.backend.db.models import PricingModel
from luxestays.backend.schemas.booking import BookingQuote
from luxestays.backend.schemas.payment import PaymentCheckResult, PaymentState
from luxestays.backend.services.notification import CollectingNotifier
from luxestays.backend.services.payment_flow import PaymentFlow
from luxestays.backend.services.payment_gateway import (
    GatewayPaymentStatusChecker,
    MockPaymentStatusChecker,
    PaymentGatewayError,
    build_upi_link,
    format_time_left,
)


@pytest.fixture
def quote():
    return BookingQuote(
        resort_id="resort-a",
        stay_option_id="deluxe",
        check_in=date(2025, 12, 20),
        check_out=date(2025, 12, 23),
        guest_count=2,
        nights=3,
        unit_price=5000,
        pricing_model=PricingModel.PER_OPTION,
        total_amount=15000
    )


@pytest.mark.asyncio
async def test_mock_checker_succeeds_on_nth_attempt(quote):
    """Mock checker stays pending until the configured attempt."""
    checker = MockPaymentStatusChecker(success_after=3)
    
    results = [await checker.check_status("ref-1", quote) for _ in range(4)]
    
    assert results == [
        PaymentCheckResult.PENDING,
        PaymentCheckResult.PENDING,
        PaymentCheckResult.SUCCESS,
        PaymentCheckResult.SUCCESS,
    ]


@pytest.mark.asyncio
async def test_mock_checker_counts_per_reference(quote):
    """Attempts are counted separately for each payment reference."""
    checker = MockPaymentStatusChecker(success_after=2)
    
    assert await checker.check_status("ref-1", quote) == PaymentCheckResult.PENDING
    assert await checker.check_status("ref-2", quote) == PaymentCheckResult.PENDING
    assert await checker.check_status("ref-1", quote) == PaymentCheckResult.SUCCESS


@pytest.mark.asyncio
async def test_mock_checker_never_succeeds_when_disabled(quote):
    """success_after=0 simulates a payment that never arrives."""
    checker = MockPaymentStatusChecker(success_after=0)
    
    for _ in range(10):
        assert await checker.check_status("ref-1", quote) == PaymentCheckResult.PENDING


@pytest.mark.asyncio
async def test_unreachable_gateway_raises(quote):
    """Connection failures surface as PaymentGatewayError."""
    checker = GatewayPaymentStatusChecker("http://127.0.0.1:1", timeout_seconds=2)
    
    with pytest.raises(PaymentGatewayError):
        await checker.check_status("ref-1", quote)


def test_upi_link_contents():
    """The deep link carries payee, amount, currency and a note naming the resort."""
    link = build_upi_link(15000, "Resort A", "ref-1")
    
    assert link.startswith("upi://pay?")
    assert "pa=luxestays@upi" in link
    assert "pn=LuxeStays" in link
    assert "am=15000.00" in link
    assert "cu=INR" in link
    assert "tn=Booking%20at%20Resort%20A" in link
    assert "tr=ref-1" in link


def test_upi_link_without_reference():
    link = build_upi_link(1234.5, "Resort B")
    
    assert "am=1234.50" in link
    assert "tr=" not in link


@pytest.mark.parametrize("seconds,expected", [
    (300, "5:00"),
    (299, "4:59"),
    (59, "0:59"),
    (0, "0:00"),
    (-5, "0:00"),
])
def test_format_time_left(seconds, expected):
    assert format_time_left(seconds) == expected


@asynccontextmanager
async def gateway(body=None, status=200, text=None, content_type="application/json"):
    """Local gateway answering every payment lookup with a fixed response."""
    seen = []
    
    async def lookup(request):
        seen.append(request)
        if text is not None:
            return web.Response(text=text, status=status, content_type=content_type)
        return web.json_response(body, status=status)
    
    app = web.Application()
    app.router.add_get("/payments/{reference}", lookup)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/")), seen
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_gateway_unknown_transaction_is_pending(quote):
    """A 404 means the gateway has not seen the payment yet."""
    async with gateway({"error": "not found"}, status=404) as (url, seen):
        checker = GatewayPaymentStatusChecker(url, api_key="secret")
        result = await checker.check_status("ref-1", quote)
    
    assert result == PaymentCheckResult.PENDING
    assert seen[0].match_info["reference"] == "ref-1"
    assert seen[0].headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
@pytest.mark.parametrize("body,expected", [
    ({"status": "captured", "amount": 15000}, PaymentCheckResult.SUCCESS),
    ({"status": "PAID", "amount": "15000.00"}, PaymentCheckResult.SUCCESS),
    ({"status": "success"}, PaymentCheckResult.SUCCESS),
    ({"status": "pending"}, PaymentCheckResult.PENDING),
    ({"status": "created"}, PaymentCheckResult.PENDING),
    ({"status": "failed"}, PaymentCheckResult.ERROR),
    ({"status": "refunded"}, PaymentCheckResult.PENDING),
    ({}, PaymentCheckResult.PENDING),
])
async def test_gateway_status_mapping(quote, body, expected):
    async with gateway(body) as (url, _):
        result = await GatewayPaymentStatusChecker(url).check_status("ref-1", quote)
    
    assert result == expected


@pytest.mark.asyncio
async def test_gateway_amount_mismatch_is_error(quote):
    """A success for the wrong amount is not treated as paid."""
    async with gateway({"status": "paid", "amount": 14000}) as (url, _):
        result = await GatewayPaymentStatusChecker(url).check_status("ref-1", quote)
    
    assert result == PaymentCheckResult.ERROR


@pytest.mark.asyncio
async def test_gateway_server_error_raises(quote):
    async with gateway(text="upstream down", status=502, content_type="text/plain") as (url, _):
        with pytest.raises(PaymentGatewayError):
            await GatewayPaymentStatusChecker(url).check_status("ref-1", quote)


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    {"body": ["paid"]},
    {"body": "paid"},
    {"body": {"status": "paid", "amount": None}},
    {"body": {"status": "paid", "amount": "fifteen thousand"}},
    {"body": {"status": "paid", "amount": True}},
    {"text": "<html>maintenance</html>", "content_type": "text/html"},
    {"text": "{not json", "content_type": "application/json"},
])
async def test_gateway_malformed_response_raises(quote, response):
    """Unreadable replies surface as gateway errors, never as crashes."""
    async with gateway(**response) as (url, _):
        with pytest.raises(PaymentGatewayError):
            await GatewayPaymentStatusChecker(url).check_status("ref-1", quote)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    ["paid"],
    {"status": "paid", "amount": None},
])
async def test_malformed_gateway_reply_keeps_flow_pending(quote, store, body):
    """The guest is told the check failed and can try again."""
    async with gateway(body) as (url, _):
        flow = PaymentFlow(
            quote=quote,
            checker=GatewayPaymentStatusChecker(url),
            notifier=CollectingNotifier()
        )
        outcome = await flow.check_payment_status(store)
    
    assert outcome.result == PaymentCheckResult.ERROR
    assert outcome.state == PaymentState.PENDING
    assert flow.notifier.messages[-1].title == "Error Checking Payment"
    assert store.list("bookings") == []

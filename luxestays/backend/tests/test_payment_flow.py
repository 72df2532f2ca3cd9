"""Tests for the timed UPI payment flow."""
import pytest
from datetime import date
from luxestays.backend.db.models import AvailabilityStatus, BookingStatus, PaymentStatus
from luxestays.backend.schemas.payment import PaymentCheckResult, PaymentState, NotificationKind
from luxestays.backend.services.notification import CollectingNotifier
from luxestays.backend.services.payment_flow import PaymentFlow, PaymentSessionRegistry, PAYMENT_WINDOW_SECONDS
from luxestays.backend.services.payment_gateway import MockPaymentStatusChecker, PaymentGatewayError, PaymentStatusChecker
from luxestays.backend.services.quote import QuoteService
from luxestays.backend.services.record_store import RecordStore, RecordStoreError


class ScriptedChecker(PaymentStatusChecker):
    """Returns queued results; repeats the last one when the queue runs dry."""
    
    def __init__(self, *results, on_check=None):
        self.results = list(results) or [PaymentCheckResult.PENDING]
        self.on_check = on_check
        self.calls = 0
    
    async def check_status(self, reference, quote):
        self.calls += 1
        if self.on_check:
            self.on_check()
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FlakyStore(RecordStore):
    """Delegates to a real store, failing selected writes."""
    
    def __init__(self, inner, fail_booking_creates=0, fail_updates=False):
        self.inner = inner
        self.fail_booking_creates = fail_booking_creates
        self.fail_updates = fail_updates
    
    def list(self, entity_type, filters=None, order=None):
        return self.inner.list(entity_type, filters, order)
    
    def get(self, entity_type, record_id):
        return self.inner.get(entity_type, record_id)
    
    def create(self, entity_type, fields):
        if entity_type == "bookings" and self.fail_booking_creates > 0:
            self.fail_booking_creates -= 1
            raise RecordStoreError("record store unavailable")
        return self.inner.create(entity_type, fields)
    
    def update(self, entity_type, record_id, fields):
        if self.fail_updates:
            raise RecordStoreError("record store unavailable")
        return self.inner.update(entity_type, record_id, fields)
    
    def delete(self, entity_type, record_id):
        return self.inner.delete(entity_type, record_id)


class CallbackCounter:
    """Counts callback invocations."""
    
    def __init__(self):
        self.completed = []
        self.failed = 0
    
    def on_complete(self, booking):
        self.completed.append(booking)
    
    def on_failed(self):
        self.failed += 1


@pytest.fixture
def quote(deluxe_stay):
    """Three nights, two guests in Deluxe."""
    return QuoteService().build_quote(deluxe_stay, date(2025, 12, 20), date(2025, 12, 23), guest_count=2)


@pytest.fixture
def callbacks():
    return CallbackCounter()


def make_flow(quote, checker, callbacks, **kwargs):
    return PaymentFlow(
        quote=quote,
        checker=checker,
        notifier=CollectingNotifier(),
        user_id="guest-001",
        resort_name="Resort A",
        on_complete=callbacks.on_complete,
        on_failed=callbacks.on_failed,
        **kwargs
    )


def test_flow_expires_when_countdown_reaches_zero(quote, callbacks):
    """No success within 300 seconds ends the flow as expired, once."""
    flow = make_flow(quote, ScriptedChecker(), callbacks)
    
    for _ in range(PAYMENT_WINDOW_SECONDS - 1):
        flow.tick()
    assert flow.state == PaymentState.PENDING
    assert flow.remaining_seconds == 1
    
    flow.tick()
    assert flow.state == PaymentState.EXPIRED
    assert callbacks.failed == 1
    
    flow.tick(30)
    assert flow.state == PaymentState.EXPIRED
    assert callbacks.failed == 1
    assert callbacks.completed == []


@pytest.mark.asyncio
async def test_run_countdown_ticks_every_second(quote, callbacks):
    """The countdown loop sleeps one second per tick until expiry."""
    flow = make_flow(quote, ScriptedChecker(), callbacks)
    sleeps = []
    
    async def fake_sleep(seconds):
        sleeps.append(seconds)
    
    state = await flow.run_countdown(sleep=fake_sleep)
    
    assert state == PaymentState.EXPIRED
    assert len(sleeps) == PAYMENT_WINDOW_SECONDS
    assert set(sleeps) == {1}
    assert callbacks.failed == 1


@pytest.mark.asyncio
async def test_success_completes_flow_and_books(quote, store, deluxe_stay, callbacks):
    """Success at t=10s confirms the booking and flags the option as limited."""
    flow = make_flow(quote, ScriptedChecker(PaymentCheckResult.SUCCESS), callbacks)
    flow.tick(10)
    
    outcome = await flow.check_payment_status(store)
    
    assert outcome.state == PaymentState.COMPLETED
    assert outcome.transitioned is True
    assert outcome.availability_updated is True
    assert len(callbacks.completed) == 1
    assert callbacks.failed == 0
    
    booking = store.get("bookings", outcome.booking_id)
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.payment_status == PaymentStatus.COMPLETED
    assert booking.payment_method == "upi"
    assert booking.total_amount == 15000
    assert booking.user_id == "guest-001"
    assert store.get("stay_options", deluxe_stay.id).availability_status == AvailabilityStatus.LIMITED


@pytest.mark.asyncio
async def test_signals_after_completion_change_nothing(quote, store, callbacks):
    """Late success or expiry after completion neither transitions nor re-books."""
    checker = ScriptedChecker(PaymentCheckResult.SUCCESS)
    flow = make_flow(quote, checker, callbacks)
    await flow.check_payment_status(store)
    
    again = await flow.check_payment_status(store)
    late = flow.apply_result(PaymentCheckResult.SUCCESS, store)
    flow.tick(PAYMENT_WINDOW_SECONDS)
    
    assert again.transitioned is False
    assert late.transitioned is False
    assert flow.state == PaymentState.COMPLETED
    assert checker.calls == 1
    assert len(store.list("bookings")) == 1
    assert len(callbacks.completed) == 1
    assert callbacks.failed == 0


@pytest.mark.asyncio
async def test_pending_check_performs_no_transition(quote, store, callbacks):
    """A pending result leaves the flow and countdown alone."""
    flow = make_flow(quote, ScriptedChecker(PaymentCheckResult.PENDING), callbacks)
    flow.tick(5)
    
    outcome = await flow.check_payment_status(store)
    
    assert outcome.state == PaymentState.PENDING
    assert outcome.transitioned is False
    assert flow.remaining_seconds == PAYMENT_WINDOW_SECONDS - 5
    assert store.list("bookings") == []
    assert flow.notifier.messages[-1].title == "Payment Pending"


@pytest.mark.asyncio
async def test_gateway_error_is_reported_not_fatal(quote, store, callbacks):
    """A failed status check is surfaced and the flow keeps waiting."""
    checker = ScriptedChecker(PaymentGatewayError("timeout"), PaymentCheckResult.SUCCESS)
    flow = make_flow(quote, checker, callbacks)
    
    first = await flow.check_payment_status(store)
    assert first.result == PaymentCheckResult.ERROR
    assert first.state == PaymentState.PENDING
    assert flow.notifier.messages[-1].kind == NotificationKind.ERROR
    
    second = await flow.check_payment_status(store)
    assert second.state == PaymentState.COMPLETED


@pytest.mark.asyncio
async def test_late_success_after_expiry_is_an_anomaly(quote, store, callbacks):
    """Success after expiry is logged and discarded."""
    flow = make_flow(quote, ScriptedChecker(PaymentCheckResult.SUCCESS), callbacks)
    flow.tick(PAYMENT_WINDOW_SECONDS)
    
    outcome = await flow.check_payment_status(store)
    
    assert outcome.anomaly is True
    assert outcome.state == PaymentState.EXPIRED
    assert len(flow.anomalies) == 1
    assert store.list("bookings") == []
    assert callbacks.completed == []
    assert callbacks.failed == 1


@pytest.mark.asyncio
async def test_expiry_during_in_flight_check_wins(quote, store, callbacks):
    """If the window closes while a check is in flight, its success is not applied."""
    now = [1000.0]
    
    def advance_past_window():
        now[0] += PAYMENT_WINDOW_SECONDS + 1
    
    checker = ScriptedChecker(PaymentCheckResult.SUCCESS, on_check=advance_past_window)
    flow = make_flow(quote, checker, callbacks, clock=lambda: now[0])
    
    outcome = await flow.check_payment_status(store)
    
    assert outcome.state == PaymentState.EXPIRED
    assert outcome.anomaly is True
    assert callbacks.failed == 1
    assert callbacks.completed == []
    assert store.list("bookings") == []


def test_abandon_stops_countdown_without_expiring(quote, store, callbacks):
    """Abandoning keeps the flow pending and makes later successes anomalies."""
    flow = make_flow(quote, ScriptedChecker(), callbacks)
    
    flow.abandon()
    flow.tick(PAYMENT_WINDOW_SECONDS * 2)
    outcome = flow.apply_result(PaymentCheckResult.SUCCESS, store)
    
    assert flow.state == PaymentState.PENDING
    assert flow.abandoned is True
    assert callbacks.failed == 0
    assert outcome.anomaly is True
    assert store.list("bookings") == []


@pytest.mark.asyncio
async def test_failed_availability_update_keeps_booking(quote, store, deluxe_stay, callbacks):
    """The booking stands even when the availability flag cannot be written."""
    flaky = FlakyStore(store, fail_updates=True)
    flow = make_flow(quote, ScriptedChecker(PaymentCheckResult.SUCCESS), callbacks)
    
    outcome = await flow.check_payment_status(flaky)
    
    assert outcome.state == PaymentState.COMPLETED
    assert outcome.booking_id is not None
    assert outcome.availability_updated is False
    assert store.get("bookings", outcome.booking_id).status == BookingStatus.CONFIRMED
    assert store.get("stay_options", deluxe_stay.id).availability_status == AvailabilityStatus.AVAILABLE
    assert "Availability Update Failed" in [m.title for m in flow.notifier.messages]
    assert len(callbacks.completed) == 1


@pytest.mark.asyncio
async def test_booking_write_failure_can_be_retried(quote, store, callbacks):
    """A failed booking write is surfaced and retried on the next check, booking once."""
    flaky = FlakyStore(store, fail_booking_creates=1)
    checker = ScriptedChecker(PaymentCheckResult.SUCCESS)
    flow = make_flow(quote, checker, callbacks)
    
    first = await flow.check_payment_status(flaky)
    assert first.state == PaymentState.COMPLETED
    assert first.booking_id is None
    assert callbacks.completed == []
    assert "Booking Error" in [m.title for m in flow.notifier.messages]
    
    second = await flow.check_payment_status(flaky)
    assert second.booking_id is not None
    assert second.transitioned is False
    assert len(store.list("bookings")) == 1
    assert len(callbacks.completed) == 1


def test_registry_expires_flows_from_clock(quote):
    """Flows fetched after the window closes come back expired."""
    now = [0.0]
    registry = PaymentSessionRegistry(clock=lambda: now[0])
    flow = registry.start(quote=quote, checker=ScriptedChecker(), user_id="guest-001")
    
    now[0] = 120.4
    assert registry.get(flow.id).remaining_seconds == PAYMENT_WINDOW_SECONDS - 120
    
    now[0] = PAYMENT_WINDOW_SECONDS
    assert registry.get(flow.id).state == PaymentState.EXPIRED


def test_registry_prunes_ended_flows(quote):
    """Ended flows are dropped once twice their window has passed."""
    now = [0.0]
    registry = PaymentSessionRegistry(clock=lambda: now[0])
    ended = registry.start(quote=quote, checker=ScriptedChecker())
    
    now[0] = PAYMENT_WINDOW_SECONDS * 2 + 1
    live = registry.start(quote=quote, checker=ScriptedChecker())
    
    assert registry.get(ended.id) is None
    assert registry.get(live.id) is live
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_lookups_prune_ended_flows_and_their_attempt_counts(quote, store):
    """Fetching any flow drops stale ones, and the mock checker forgets their references."""
    now = [0.0]
    registry = PaymentSessionRegistry(clock=lambda: now[0])
    checker = MockPaymentStatusChecker(success_after=0)
    ended = registry.start(quote=quote, checker=checker)
    
    now[0] = 10
    live = registry.start(quote=quote, checker=checker)
    ended.abandon()
    
    await ended.check_payment_status(store)
    await live.check_payment_status(store)
    assert checker.attempts(ended.id) == 1
    
    now[0] = PAYMENT_WINDOW_SECONDS * 2 + 1
    assert registry.get(live.id) is live
    
    assert registry.get(ended.id) is None
    assert checker.attempts(ended.id) == 0
    assert checker.attempts(live.id) == 1
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_clear_forgets_all_references(quote, store):
    registry = PaymentSessionRegistry(clock=lambda: 0.0)
    checker = MockPaymentStatusChecker()
    flow = registry.start(quote=quote, checker=checker)
    await flow.check_payment_status(store)
    assert checker.attempts(flow.id) == 1
    
    registry.clear()
    
    assert len(registry) == 0
    assert checker.attempts(flow.id) == 0


def test_snapshot_reports_upi_link_and_time_left(quote, callbacks):
    """Snapshots carry the UPI deep link, m:ss countdown and drained notifications."""
    flow = make_flow(quote, ScriptedChecker(), callbacks)
    flow.tick(61)
    flow.notifier.notify(NotificationKind.INFO, "Payment Pending", "")
    
    snapshot = flow.snapshot()
    
    assert snapshot.time_left == "3:59"
    assert snapshot.upi_link.startswith("upi://pay?")
    assert "am=15000.00" in snapshot.upi_link
    assert len(snapshot.notifications) == 1
    assert flow.snapshot().notifications == []

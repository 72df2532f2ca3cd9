"""Timed UPI payment confirmation flow."""
import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional
from luxestays.backend.schemas.booking import BookingQuote
from luxestays.backend.schemas.payment import (
    NotificationKind,
    PaymentCheckOutcome,
    PaymentCheckResult,
    PaymentSession,
    PaymentState,
)
from luxestays.backend.services.booking import BookingService
from luxestays.backend.services.notification import CollectingNotifier, Notifier
from luxestays.backend.services.payment_gateway import (
    PaymentGatewayError,
    PaymentStatusChecker,
    build_upi_link,
    format_time_left,
)
from luxestays.backend.services.record_store import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

# Hard limit with no extension
PAYMENT_WINDOW_SECONDS = 300


class PaymentFlow:
    """
    Payment confirmation state machine for one quote.
    
    Starts pending with a 300 second budget. The first terminal transition
    wins: expiry when the countdown reaches zero, or completion when a status
    check reports success. Nothing is written to the record store before
    completion. A success that arrives after expiry (or after the guest
    abandoned the flow) is logged as an anomaly and never applied.
    """
    
    def __init__(
        self,
        quote: BookingQuote,
        checker: PaymentStatusChecker,
        booking_service: Optional[BookingService] = None,
        notifier: Optional[Notifier] = None,
        user_id: Optional[str] = None,
        resort_name: str = "",
        guest_name: Optional[str] = None,
        guest_email: Optional[str] = None,
        on_complete: Optional[Callable[[Any], None]] = None,
        on_failed: Optional[Callable[[], None]] = None,
        budget_seconds: int = PAYMENT_WINDOW_SECONDS,
        flow_id: Optional[str] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        self.id = flow_id or str(uuid.uuid4())
        self.quote = quote
        self.checker = checker
        self.booking_service = booking_service or BookingService()
        self.notifier = notifier or CollectingNotifier(__name__)
        self.user_id = user_id
        self.resort_name = resort_name
        self.guest_name = guest_name
        self.guest_email = guest_email
        self.on_complete = on_complete
        self.on_failed = on_failed
        self.budget_seconds = budget_seconds
        self.clock = clock
        self.started_at = clock() if clock else None
        
        self.state = PaymentState.PENDING
        self.remaining_seconds = budget_seconds
        self.abandoned = False
        self.booking = None
        self.availability_updated: Optional[bool] = None
        self.anomalies: List[str] = []
        self._completion_fired = False
        self._failure_fired = False
    
    @property
    def countdown_running(self) -> bool:
        return self.state == PaymentState.PENDING and not self.abandoned
    
    @property
    def upi_link(self) -> str:
        return build_upi_link(self.quote.total_amount, self.resort_name, self.id)
    
    def tick(self, seconds: int = 1) -> PaymentState:
        """
        Advance the countdown.
        
        Args:
            seconds: Seconds elapsed since the previous tick
        
        Returns:
            State after the tick
        """
        if not self.countdown_running or seconds <= 0:
            return self.state
        
        self.remaining_seconds = max(0, self.remaining_seconds - seconds)
        if self.remaining_seconds == 0:
            self._expire()
        return self.state
    
    async def run_countdown(self, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep) -> PaymentState:
        """Tick once a second until the flow ends or is abandoned."""
        while self.countdown_running:
            await sleep(1)
            self.tick()
        return self.state
    
    def sync_clock(self) -> PaymentState:
        """Catch the countdown up with the wall clock, when the flow has one."""
        if self.clock is None:
            return self.state
        elapsed = int(self.clock() - self.started_at)
        due_remaining = max(0, self.budget_seconds - elapsed)
        return self.tick(self.remaining_seconds - due_remaining)
    
    def abandon(self) -> None:
        """Stop the countdown without ending the flow; nothing needs undoing."""
        if self.state == PaymentState.PENDING and not self.abandoned:
            self.abandoned = True
            logger.info(f"Payment {self.id} abandoned with {self.remaining_seconds}s left")
    
    async def check_payment_status(self, store: RecordStore) -> PaymentCheckOutcome:
        """
        Ask the payment provider for the status of this payment and apply it.
        
        Args:
            store: Record store used if the payment completes
        
        Returns:
            PaymentCheckOutcome
        """
        self.sync_clock()
        if self.state == PaymentState.COMPLETED and self.booking is not None:
            return self._outcome(PaymentCheckResult.SUCCESS, transitioned=False)
        
        try:
            result = await self.checker.check_status(self.id, self.quote)
        except PaymentGatewayError as e:
            logger.warning(f"Payment status check failed for {self.id}: {e}")
            result = PaymentCheckResult.ERROR
        
        # The countdown may have run out while the check was in flight
        self.sync_clock()
        return self.apply_result(result, store)
    
    def apply_result(self, result: PaymentCheckResult, store: RecordStore) -> PaymentCheckOutcome:
        """
        Apply a payment-status result to the flow.
        
        Pending results never transition. Errors are reported and leave the
        countdown untouched.
        """
        result = PaymentCheckResult(result)
        
        if result == PaymentCheckResult.SUCCESS:
            return self._apply_success(store)
        
        if self.countdown_running:
            if result == PaymentCheckResult.ERROR:
                self.notifier.notify(
                    NotificationKind.ERROR,
                    "Error Checking Payment",
                    "Please try again or contact support."
                )
            else:
                self.notifier.notify(
                    NotificationKind.INFO,
                    "Payment Pending",
                    "Please complete the payment to confirm your booking."
                )
        return self._outcome(result, transitioned=False)
    
    def _apply_success(self, store: RecordStore) -> PaymentCheckOutcome:
        if self.state == PaymentState.EXPIRED or self.abandoned:
            reason = "expired" if self.state == PaymentState.EXPIRED else "was abandoned"
            message = f"Payment {self.id} reported success after the flow {reason}; not applied"
            logger.warning(message)
            self.anomalies.append(message)
            self.notifier.notify(
                NotificationKind.WARNING,
                "Late Payment Received",
                "Your payment arrived after the payment window closed. Please contact support."
            )
            return self._outcome(PaymentCheckResult.SUCCESS, transitioned=False, anomaly=True)
        
        transitioned = False
        if self.state == PaymentState.PENDING:
            # Claim the terminal state before touching the store
            self.state = PaymentState.COMPLETED
            transitioned = True
            self.notifier.notify(
                NotificationKind.SUCCESS,
                "Payment Successful!",
                "Your booking is being confirmed."
            )
        
        if self.booking is None:
            self._commit(store)
        return self._outcome(PaymentCheckResult.SUCCESS, transitioned=transitioned)
    
    def _commit(self, store: RecordStore) -> None:
        try:
            commit = self.booking_service.confirm_booking(
                store,
                self.quote,
                user_id=self.user_id,
                payment_reference=self.id,
                guest_name=self.guest_name,
                guest_email=self.guest_email
            )
        except RecordStoreError as e:
            logger.error(f"Payment {self.id} succeeded but booking could not be saved: {e}")
            self.notifier.notify(
                NotificationKind.ERROR,
                "Booking Error",
                "Your payment was received but the booking could not be saved. Check the payment status again to retry."
            )
            return
        
        self.booking = commit.booking
        self.availability_updated = commit.availability_updated
        self.notifier.notify(
            NotificationKind.SUCCESS,
            "Booking Confirmed!",
            "Your stay has been successfully booked."
        )
        if commit.error:
            self.notifier.notify(
                NotificationKind.ERROR,
                "Availability Update Failed",
                "Your booking is confirmed, but the stay option availability could not be updated."
            )
        self._fire_complete()
    
    def _expire(self) -> None:
        if self.state != PaymentState.PENDING:
            return
        self.state = PaymentState.EXPIRED
        logger.info(f"Payment {self.id} expired")
        self.notifier.notify(
            NotificationKind.ERROR,
            "Payment Failed",
            "Payment time expired. Please try booking again."
        )
        self._fire_failed()
    
    def _fire_complete(self) -> None:
        if self._completion_fired:
            return
        self._completion_fired = True
        if self.on_complete:
            self.on_complete(self.booking)
    
    def _fire_failed(self) -> None:
        if self._failure_fired:
            return
        self._failure_fired = True
        if self.on_failed:
            self.on_failed()
    
    def _outcome(
        self,
        result: PaymentCheckResult,
        transitioned: bool,
        anomaly: bool = False
    ) -> PaymentCheckOutcome:
        return PaymentCheckOutcome(
            result=result,
            state=self.state,
            transitioned=transitioned,
            anomaly=anomaly,
            booking_id=self.booking.id if self.booking is not None else None,
            availability_updated=self.availability_updated,
            remaining_seconds=self.remaining_seconds
        )
    
    def snapshot(self) -> PaymentSession:
        """Current view of the flow, draining pending notifications when collected."""
        notifications = self.notifier.drain() if isinstance(self.notifier, CollectingNotifier) else []
        return PaymentSession(
            id=self.id,
            state=self.state,
            quote=self.quote,
            remaining_seconds=self.remaining_seconds,
            time_left=format_time_left(self.remaining_seconds),
            upi_link=self.upi_link,
            abandoned=self.abandoned,
            booking_id=self.booking.id if self.booking is not None else None,
            availability_updated=self.availability_updated,
            notifications=notifications
        )


class PaymentSessionRegistry:
    """
    In-process registry of payment flows that outlive a single HTTP request.
    
    Flows created through the registry share its monotonic clock, so expiry
    fires on the first access after the window closes.
    """
    
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._flows: Dict[str, PaymentFlow] = {}
    
    def start(self, **flow_kwargs) -> PaymentFlow:
        """Create and register a new flow; its countdown starts now."""
        self.prune()
        flow = PaymentFlow(clock=self.clock, **flow_kwargs)
        self._flows[flow.id] = flow
        logger.info(f"Payment {flow.id} started for {flow.quote.total_amount:.2f} on stay option {flow.quote.stay_option_id}")
        return flow
    
    def get(self, flow_id: str) -> Optional[PaymentFlow]:
        """Look up a flow, bringing its countdown up to date."""
        self.prune()
        flow = self._flows.get(flow_id)
        if flow is not None:
            flow.sync_clock()
        return flow
    
    def discard(self, flow_id: str) -> None:
        flow = self._flows.pop(flow_id, None)
        if flow is not None:
            flow.checker.forget(flow.id)
    
    def clear(self) -> None:
        for flow_id in list(self._flows):
            self.discard(flow_id)
    
    def prune(self) -> int:
        """Drop ended flows once twice their window has passed. Returns the number dropped."""
        now = self.clock()
        stale = []
        for flow_id, flow in self._flows.items():
            flow.sync_clock()
            if not flow.countdown_running and now - flow.started_at > 2 * flow.budget_seconds:
                stale.append(flow_id)
        for flow_id in stale:
            self.discard(flow_id)
        return len(stale)
    
    def __len__(self) -> int:
        return len(self._flows)


payment_sessions = PaymentSessionRegistry()

"""Payment-status check providers for UPI payments."""
from abc import ABC, abstractmethod
from typing import Dict
from urllib.parse import quote, urlencode
import asyncio
import logging
import aiohttp
from aiohttp import ClientTimeout
from luxestays.backend.core.config import settings
from luxestays.backend.schemas.booking import BookingQuote
from luxestays.backend.schemas.payment import PaymentCheckResult


class PaymentGatewayError(Exception):
    """The payment-status check could not be completed."""


class PaymentStatusChecker(ABC):
    """Abstract base class for payment-status providers."""
    
    @abstractmethod
    async def check_status(self, reference: str, quote: BookingQuote) -> PaymentCheckResult:
        """
        Ask whether the UPI payment for a quote has been received.
        
        Args:
            reference: Payment session reference (used as the UPI transaction note)
            quote: Quote being paid
        
        Returns:
            PaymentCheckResult
        
        Raises:
            PaymentGatewayError: If the provider could not be reached or
                answered with something unreadable
        """
        pass
    
    def forget(self, reference: str) -> None:
        """Drop any per-reference state once a payment flow is discarded."""
        pass


class MockPaymentStatusChecker(PaymentStatusChecker):
    """Deterministic mock: reports success on the Nth check of each reference."""
    
    def __init__(self, success_after: int = 2):
        """
        Initialize mock checker.
        
        Args:
            success_after: Check attempt (1-based) on which success is reported;
                0 means the payment never arrives
        """
        self.success_after = success_after
        self._attempts: Dict[str, int] = {}
    
    async def check_status(self, reference: str, quote: BookingQuote) -> PaymentCheckResult:
        attempt = self._attempts.get(reference, 0) + 1
        self._attempts[reference] = attempt
        
        if self.success_after and attempt >= self.success_after:
            return PaymentCheckResult.SUCCESS
        return PaymentCheckResult.PENDING
    
    def attempts(self, reference: str) -> int:
        """Checks made so far for a reference."""
        return self._attempts.get(reference, 0)
    
    def forget(self, reference: str) -> None:
        self._attempts.pop(reference, None)


class GatewayPaymentStatusChecker(PaymentStatusChecker):
    """Payment-status check against an HTTP payment gateway."""
    
    STATUS_MAP = {
        "success": PaymentCheckResult.SUCCESS,
        "captured": PaymentCheckResult.SUCCESS,
        "paid": PaymentCheckResult.SUCCESS,
        "pending": PaymentCheckResult.PENDING,
        "created": PaymentCheckResult.PENDING,
        "failed": PaymentCheckResult.ERROR,
    }
    
    def __init__(self, base_url: str, api_key: str = None, timeout_seconds: int = 15):
        """
        Initialize gateway checker.
        
        Args:
            base_url: Gateway API base URL
            api_key: Bearer token for the gateway
            timeout_seconds: Total request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"
        self.timeout = ClientTimeout(total=timeout_seconds)
        self.logger = logging.getLogger(__name__)
    
    async def check_status(self, reference: str, quote: BookingQuote) -> PaymentCheckResult:
        url = f"{self.base_url}/payments/{reference}"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url, headers=self.headers) as resp:
                    if resp.status == 404:
                        # Gateway has not seen the transaction yet
                        return PaymentCheckResult.PENDING
                    if resp.status != 200:
                        error_text = await resp.text()
                        raise PaymentGatewayError(f"Gateway error: {resp.status} - {error_text}")
                    payload = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.warning(f"Payment gateway unreachable for {reference}: {e}")
            raise PaymentGatewayError(str(e)) from e
        except ValueError as e:
            # Declared JSON but the body does not parse
            raise PaymentGatewayError(f"Unreadable gateway response for {reference}: {e}") from e
        
        if not isinstance(payload, dict):
            raise PaymentGatewayError(f"Unexpected gateway response for {reference}: {payload!r}")
        
        status = str(payload.get("status", "pending")).lower()
        result = self.STATUS_MAP.get(status, PaymentCheckResult.PENDING)
        
        if result == PaymentCheckResult.SUCCESS:
            paid = self._parse_amount(reference, payload.get("amount", quote.total_amount))
            if round(paid, 2) != round(quote.total_amount, 2):
                self.logger.warning(
                    f"Payment {reference} amount mismatch: paid {paid}, expected {quote.total_amount}"
                )
                return PaymentCheckResult.ERROR
        return result
    
    @staticmethod
    def _parse_amount(reference: str, amount) -> float:
        """Read the paid amount, rejecting nulls, booleans and non-numeric text."""
        if isinstance(amount, bool) or not isinstance(amount, (int, float, str)):
            raise PaymentGatewayError(f"Gateway sent no usable amount for {reference}: {amount!r}")
        try:
            return float(amount)
        except ValueError as e:
            raise PaymentGatewayError(f"Gateway sent no usable amount for {reference}: {amount!r}") from e


def build_upi_link(amount: float, resort_name: str, reference: str = None) -> str:
    """
    Build a upi://pay deep link for the payee configured in settings.
    
    Args:
        amount: Amount in INR
        resort_name: Resort name used in the transaction note
        reference: Payment reference, sent as the transaction ref
    
    Returns:
        UPI deep link
    """
    params = {
        "pa": settings.upi_payee_vpa,
        "pn": settings.upi_payee_name,
        "am": f"{amount:.2f}",
        "cu": settings.currency,
        "tn": f"Booking at {resort_name}",
    }
    if reference:
        params["tr"] = reference
    return "upi://pay?" + urlencode(params, quote_via=quote, safe="@")


def format_time_left(seconds: int) -> str:
    """Format remaining seconds as m:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


_mock_checker = None


def get_payment_checker() -> PaymentStatusChecker:
    """
    Get payment-status checker based on configuration.
    
    The mock checker is shared so attempt counts survive across requests.
    """
    global _mock_checker
    
    if settings.payment_provider == "gateway":
        if not settings.payment_gateway_url:
            raise ValueError("payment_gateway_url is required for the gateway provider")
        return GatewayPaymentStatusChecker(
            base_url=settings.payment_gateway_url,
            api_key=settings.payment_gateway_api_key,
            timeout_seconds=settings.payment_gateway_timeout_seconds
        )
    
    if _mock_checker is None:
        _mock_checker = MockPaymentStatusChecker(success_after=settings.mock_payment_success_after)
    return _mock_checker

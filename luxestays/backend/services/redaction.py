"""PII redaction service."""
import re
from typing import List


class RedactionService:
    """Service for redacting guest PII from text."""
    
    EMAIL_PATTERN = re.compile(
        r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'
    )
    
    # UPI virtual payment addresses have no TLD (guest@okbank)
    UPI_HANDLE_PATTERN = re.compile(r'\b[A-Za-z0-9._-]{2,}@[A-Za-z]{2,}\b')
    
    # Indian mobile numbers, optionally prefixed with +91
    PHONE_PATTERN = re.compile(r'(?<!\d)(?:\+91[\s-]?)?[6-9]\d{9}(?!\d)')
    
    def __init__(self, allowed_handles: List[str] = None):
        """
        Initialize redaction service.
        
        Args:
            allowed_handles: UPI handles that are safe to log (e.g. our own payee VPA)
        """
        self.allowed_handles = {h.lower() for h in (allowed_handles or [])}
    
    def redact_email(self, text: str) -> str:
        """Redact email addresses."""
        return self.EMAIL_PATTERN.sub('[EMAIL_REDACTED]', text)
    
    def redact_upi_handles(self, text: str) -> str:
        """Redact UPI handles, keeping allowed payee handles."""
        def _replace(match: re.Match) -> str:
            if match.group(0).lower() in self.allowed_handles:
                return match.group(0)
            return '[UPI_REDACTED]'
        return self.UPI_HANDLE_PATTERN.sub(_replace, text)
    
    def redact_phone(self, text: str) -> str:
        """Redact mobile numbers."""
        return self.PHONE_PATTERN.sub('[PHONE_REDACTED]', text)
    
    def redact_text(self, text: str) -> str:
        """Redact all PII from text."""
        if not isinstance(text, str):
            return text
        
        result = self.redact_email(text)
        result = self.redact_upi_handles(result)
        result = self.redact_phone(result)
        return result
    
    def redact_list(self, items: List[str]) -> List[str]:
        """Redact PII from a list of strings."""
        return [self.redact_text(item) for item in items]

"""Logging configuration with guest PII redaction."""
import logging
import sys
from typing import Iterable, Optional
from luxestays.backend.core.config import settings
from luxestays.backend.services.redaction import RedactionService

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "aiohttp.access", "sqlalchemy.engine")


class RedactionFilter(logging.Filter):
    """
    Scrubs guest contact details from log records.
    
    The resort's own payee VPA is left readable so payment links can be
    traced in the logs.
    """
    
    def __init__(self, allowed_handles: Optional[Iterable[str]] = None):
        super().__init__()
        handles = list(allowed_handles) if allowed_handles is not None else [settings.upi_payee_vpa]
        self.redactor = RedactionService(allowed_handles=handles)
    
    def _scrub(self, value):
        return self.redactor.redact_text(value) if isinstance(value, str) else value
    
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redactor.redact_text(record.msg)
        if isinstance(record.args, dict):
            record.args = {key: self._scrub(value) for key, value in record.args.items()}
        elif record.args:
            record.args = tuple(self._scrub(arg) for arg in record.args)
        return True


def setup_logging(log_level: str = "INFO") -> None:
    """Log to stdout through the redaction filter."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RedactionFilter())
    
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[handler]
    )
    
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

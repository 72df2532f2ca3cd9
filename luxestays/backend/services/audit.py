"""Audit logging service."""
from typing import Optional, Dict, Any
import hashlib
import json
import logging
from luxestays.backend.db.models import AuditLog
from luxestays.backend.services.record_store import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)


class AuditService:
    """Service for audit logging."""
    
    @staticmethod
    def state_hash(state: Optional[Dict[str, Any]]) -> Optional[str]:
        """Short sha256 fingerprint of a JSON-serializable state."""
        if not state:
            return None
        return hashlib.sha256(
            json.dumps(state, sort_keys=True, default=str).encode()
        ).hexdigest()[:16]
    
    def log_action(
        self,
        action: str,
        user: Optional[str],
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        before_state: Optional[Dict[str, Any]] = None,
        after_state: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
        store: RecordStore = None
    ) -> Optional[AuditLog]:
        """
        Log an action to audit log.
        
        Args:
            action: Action name (resort_create, booking_confirmed, etc.)
            user: User identifier
            entity_type: Entity touched by the action
            entity_id: ID of the entity touched
            before_state: State before action (optional)
            after_state: State after action (optional)
            details: Additional details (optional)
            store: Record store
        
        Returns:
            AuditLog entry, or None if no store was given or the write failed
        """
        if store is None:
            return None
        
        try:
            return store.create("audit_logs", {
                "user": user or "system",
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "before_hash": self.state_hash(before_state),
                "after_hash": self.state_hash(after_state),
                "details": details or {},
            })
        except RecordStoreError as e:
            # Audit trail is secondary to the action itself
            logger.warning(f"Audit log write failed for {action} on {entity_id}: {e}")
            return None

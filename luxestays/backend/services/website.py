"""Website settings and contact form service."""
from typing import Any, List, Optional
import logging
from luxestays.backend.schemas.website import ContactMessageCreate, WebsiteSettings, WebsiteSettingsUpdate
from luxestays.backend.services.audit import AuditService
from luxestays.backend.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class WebsiteService:
    """Service for the public site content managed from the CEO dashboard."""
    
    def __init__(self, audit_service: AuditService = None):
        self.audit_service = audit_service or AuditService()
    
    def get_settings(self, store: RecordStore) -> WebsiteSettings:
        """Stored settings, with blanks for keys never saved."""
        stored = {s.setting_key: s.setting_value for s in store.list("website_settings")}
        known = {key: value for key, value in stored.items() if key in WebsiteSettings.model_fields}
        return WebsiteSettings(**known)
    
    def update_settings(
        self,
        store: RecordStore,
        update: WebsiteSettingsUpdate,
        user: Optional[str] = None
    ) -> WebsiteSettings:
        """
        Upsert each provided setting by key.
        
        Args:
            store: Record store
            update: Settings to change; None values are left alone
            user: Operator making the change
        
        Returns:
            Settings after the update
        
        Raises:
            RecordStoreError: If a write fails (earlier keys stay saved)
        """
        before = self.get_settings(store)
        changes = update.model_dump(exclude_none=True)
        
        for key, value in changes.items():
            existing = store.list("website_settings", filters={"setting_key": key})
            if existing:
                store.update("website_settings", existing[0].id, {"setting_value": value})
            else:
                store.create("website_settings", {"setting_key": key, "setting_value": value})
        
        after = self.get_settings(store)
        self.audit_service.log_action(
            action="website_settings_update",
            user=user,
            entity_type="website_settings",
            before_state=before.model_dump(),
            after_state=after.model_dump(),
            details={"keys": sorted(changes)},
            store=store
        )
        return after
    
    def submit_contact_message(self, store: RecordStore, message: ContactMessageCreate) -> Any:
        record = store.create("contact_messages", message.model_dump())
        logger.info(f"Contact message {record.id} received from {message.email}")
        return record
    
    def list_contact_messages(self, store: RecordStore) -> List[Any]:
        """Contact messages, newest first."""
        return store.list("contact_messages", order="-created_at")

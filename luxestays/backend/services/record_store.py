"""Record store interface and SQLAlchemy implementation."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from luxestays.backend.db.models import Resort, StayOption, Booking, Review, AuditLog, WebsiteSetting, ContactMessage
from luxestays.backend.db.session import get_db

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    """A record store call failed; callers may retry."""


class RecordStore(ABC):
    """Generic CRUD over resorts, stay options, bookings, reviews, site content and audit logs."""
    
    @abstractmethod
    def list(
        self,
        entity_type: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None
    ) -> List[Any]:
        """
        List records.
        
        Args:
            entity_type: Entity name (resorts, stay_options, bookings, reviews, website_settings, contact_messages)
            filters: Equality filters by field name
            order: Field to order by, prefixed with "-" for descending
        
        Returns:
            Matching records
        """
        pass
    
    @abstractmethod
    def get(self, entity_type: str, record_id: str) -> Optional[Any]:
        """Get a record by ID, or None when it does not exist."""
        pass
    
    @abstractmethod
    def create(self, entity_type: str, fields: Dict[str, Any]) -> Any:
        """Create a record."""
        pass
    
    @abstractmethod
    def update(self, entity_type: str, record_id: str, fields: Dict[str, Any]) -> Any:
        """Update fields on an existing record."""
        pass
    
    @abstractmethod
    def delete(self, entity_type: str, record_id: str) -> bool:
        """Delete a record. Returns False when it did not exist."""
        pass


class SQLAlchemyRecordStore(RecordStore):
    """Record store backed by a SQLAlchemy session; every write commits on its own."""
    
    MODELS = {
        "resorts": Resort,
        "stay_options": StayOption,
        "bookings": Booking,
        "reviews": Review,
        "audit_logs": AuditLog,
        "website_settings": WebsiteSetting,
        "contact_messages": ContactMessage,
    }
    
    def __init__(self, db: Session):
        self.db = db
    
    def _model(self, entity_type: str):
        try:
            return self.MODELS[entity_type]
        except KeyError:
            raise ValueError(f"Unknown entity type: {entity_type}")
    
    def list(
        self,
        entity_type: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None
    ) -> List[Any]:
        model = self._model(entity_type)
        query = self.db.query(model)
        
        if filters:
            query = query.filter_by(**filters)
        
        if order:
            column = getattr(model, order.lstrip("-"))
            query = query.order_by(column.desc() if order.startswith("-") else column.asc())
        
        try:
            return query.all()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to list {entity_type}: {e}") from e
    
    def get(self, entity_type: str, record_id: str) -> Optional[Any]:
        model = self._model(entity_type)
        try:
            return self.db.query(model).filter_by(id=record_id).first()
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to load {entity_type} {record_id}: {e}") from e
    
    def create(self, entity_type: str, fields: Dict[str, Any]) -> Any:
        model = self._model(entity_type)
        record = model(**fields)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Create %s failed: %s", entity_type, e)
            raise RecordStoreError(f"Failed to create {entity_type}: {e}") from e
        return record
    
    def update(self, entity_type: str, record_id: str, fields: Dict[str, Any]) -> Any:
        record = self.get(entity_type, record_id)
        if record is None:
            raise RecordStoreError(f"{entity_type} {record_id} not found")
        
        for key, value in fields.items():
            setattr(record, key, value)
        
        try:
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Update %s %s failed: %s", entity_type, record_id, e)
            raise RecordStoreError(f"Failed to update {entity_type} {record_id}: {e}") from e
        return record
    
    def delete(self, entity_type: str, record_id: str) -> bool:
        record = self.get(entity_type, record_id)
        if record is None:
            return False
        
        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Delete %s %s failed: %s", entity_type, record_id, e)
            raise RecordStoreError(f"Failed to delete {entity_type} {record_id}: {e}") from e
        return True


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    """Dependency for FastAPI to get a record store bound to the request session."""
    return SQLAlchemyRecordStore(db)

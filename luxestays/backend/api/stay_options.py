"""Stay option CRUD API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from luxestays.backend.core.security import ensure_can_manage_resort, require_operator
from luxestays.backend.schemas.stay_option import StayOptionCreate, StayOption as StayOptionSchema
from luxestays.backend.services.audit import AuditService
from luxestays.backend.services.record_store import RecordStore, RecordStoreError, get_record_store

router = APIRouter()
audit_service = AuditService()


def _require_resort(store: RecordStore, resort_id: str) -> None:
    if not store.get("resorts", resort_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resort {resort_id} not found"
        )


def _get_stay_option_or_404(store: RecordStore, stay_option_id: str):
    stay_option = store.get("stay_options", stay_option_id)
    if not stay_option:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Stay option {stay_option_id} not found"
        )
    return stay_option


@router.get("/resorts/{resort_id}/stay-options", response_model=List[StayOptionSchema])
async def list_stay_options(
    resort_id: str,
    store: RecordStore = Depends(get_record_store)
):
    """List stay options for a resort."""
    _require_resort(store, resort_id)
    return store.list("stay_options", filters={"resort_id": resort_id}, order="created_at")


@router.post("/resorts/{resort_id}/stay-options", response_model=StayOptionSchema, status_code=status.HTTP_201_CREATED)
async def create_stay_option(
    resort_id: str,
    stay_option: StayOptionCreate,
    operator: str = Depends(require_operator),
    store: RecordStore = Depends(get_record_store)
):
    """Add a stay option to a resort."""
    _require_resort(store, resort_id)
    ensure_can_manage_resort(operator, resort_id)
    
    try:
        db_stay_option = store.create("stay_options", {"resort_id": resort_id, **stay_option.model_dump()})
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    
    audit_service.log_action(
        action="stay_option_create",
        user=operator,
        entity_type="stay_options",
        entity_id=db_stay_option.id,
        after_state=stay_option.model_dump(mode="json"),
        details={"resort_id": resort_id},
        store=store
    )
    return db_stay_option


@router.get("/stay-options/{stay_option_id}", response_model=StayOptionSchema)
async def get_stay_option(
    stay_option_id: str,
    store: RecordStore = Depends(get_record_store)
):
    """Get a specific stay option by ID."""
    return _get_stay_option_or_404(store, stay_option_id)


@router.put("/stay-options/{stay_option_id}", response_model=StayOptionSchema)
async def update_stay_option(
    stay_option_id: str,
    stay_option_update: StayOptionCreate,
    operator: str = Depends(require_operator),
    store: RecordStore = Depends(get_record_store)
):
    """Update a stay option, including its availability status."""
    existing = _get_stay_option_or_404(store, stay_option_id)
    ensure_can_manage_resort(operator, existing.resort_id)
    before_state = StayOptionCreate.model_validate(existing, from_attributes=True).model_dump(mode="json")
    
    try:
        stay_option = store.update("stay_options", stay_option_id, stay_option_update.model_dump())
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    
    audit_service.log_action(
        action="stay_option_update",
        user=operator,
        entity_type="stay_options",
        entity_id=stay_option_id,
        before_state=before_state,
        after_state=stay_option_update.model_dump(mode="json"),
        store=store
    )
    return stay_option


@router.delete("/stay-options/{stay_option_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stay_option(
    stay_option_id: str,
    operator: str = Depends(require_operator),
    store: RecordStore = Depends(get_record_store)
):
    """Delete a stay option."""
    existing = _get_stay_option_or_404(store, stay_option_id)
    ensure_can_manage_resort(operator, existing.resort_id)
    
    try:
        store.delete("stay_options", stay_option_id)
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    
    audit_service.log_action(
        action="stay_option_delete",
        user=operator,
        entity_type="stay_options",
        entity_id=stay_option_id,
        store=store
    )

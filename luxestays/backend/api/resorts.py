"""Resort search and operator CRUD API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional
from luxestays.backend.core.security import ensure_can_manage_resort, require_ceo, require_operator
from luxestays.backend.schemas.resort import ResortCreate, Resort as ResortSchema
from luxestays.backend.schemas.search import SearchCriteria, SortKey
from luxestays.backend.services.audit import AuditService
from luxestays.backend.services.record_store import RecordStore, RecordStoreError, get_record_store
from luxestays.backend.services.search import ResortSearchService

router = APIRouter()
search_service = ResortSearchService()
audit_service = AuditService()


def _get_resort_or_404(store: RecordStore, resort_id: str):
    resort = store.get("resorts", resort_id)
    if not resort:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resort {resort_id} not found"
        )
    return resort


@router.get("/resorts", response_model=List[ResortSchema])
async def search_resorts(
    term: str = Query("", description="Match against resort name or location"),
    min_price: float = Query(0, ge=0, description="Lowest nightly price"),
    max_price: Optional[float] = Query(None, ge=0, description="Highest nightly price"),
    min_guests: int = Query(1, ge=1, description="Number of guests"),
    amenities: List[str] = Query([], description="Required amenities (all must match)"),
    sort: SortKey = Query(SortKey.RATING_DESC, description="Sort order"),
    store: RecordStore = Depends(get_record_store)
):
    """Search, filter and sort resorts."""
    criteria = SearchCriteria(
        term=term,
        min_price=min_price,
        max_price=max_price,
        min_guests=min_guests,
        amenities=amenities,
        sort=sort
    )
    resorts = store.list("resorts", order="-created_at")
    return search_service.search(resorts, criteria)


@router.get("/resorts/{resort_id}", response_model=ResortSchema)
async def get_resort(
    resort_id: str,
    store: RecordStore = Depends(get_record_store)
):
    """Get a specific resort with its stay options."""
    return _get_resort_or_404(store, resort_id)


@router.post("/resorts", response_model=ResortSchema, status_code=status.HTTP_201_CREATED)
async def create_resort(
    resort: ResortCreate,
    operator: str = Depends(require_ceo),
    store: RecordStore = Depends(get_record_store)
):
    """Create a new resort."""
    try:
        db_resort = store.create("resorts", resort.model_dump())
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    
    audit_service.log_action(
        action="resort_create",
        user=operator,
        entity_type="resorts",
        entity_id=db_resort.id,
        after_state=resort.model_dump(mode="json"),
        store=store
    )
    return db_resort


@router.put("/resorts/{resort_id}", response_model=ResortSchema)
async def update_resort(
    resort_id: str,
    resort_update: ResortCreate,
    operator: str = Depends(require_operator),
    store: RecordStore = Depends(get_record_store)
):
    """Update a resort."""
    ensure_can_manage_resort(operator, resort_id)
    existing = _get_resort_or_404(store, resort_id)
    before_state = ResortCreate.model_validate(existing, from_attributes=True).model_dump(mode="json")
    
    try:
        resort = store.update("resorts", resort_id, resort_update.model_dump())
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    
    audit_service.log_action(
        action="resort_update",
        user=operator,
        entity_type="resorts",
        entity_id=resort_id,
        before_state=before_state,
        after_state=resort_update.model_dump(mode="json"),
        store=store
    )
    return resort


@router.delete("/resorts/{resort_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resort(
    resort_id: str,
    operator: str = Depends(require_ceo),
    store: RecordStore = Depends(get_record_store)
):
    """Delete a resort and its stay options."""
    _get_resort_or_404(store, resort_id)
    
    try:
        store.delete("resorts", resort_id)
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    
    audit_service.log_action(
        action="resort_delete",
        user=operator,
        entity_type="resorts",
        entity_id=resort_id,
        store=store
    )

"""Resort review API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from luxestays.backend.core.security import require_user
from luxestays.backend.schemas.review import ReviewCreate, Review as ReviewSchema
from luxestays.backend.services.record_store import RecordStore, RecordStoreError, get_record_store
from luxestays.backend.services.review import ReviewService, ReviewNotAllowedError

router = APIRouter()
review_service = ReviewService()


def _require_resort(store: RecordStore, resort_id: str) -> None:
    if not store.get("resorts", resort_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resort {resort_id} not found"
        )


@router.get("/resorts/{resort_id}/reviews", response_model=List[ReviewSchema])
async def list_reviews(
    resort_id: str,
    store: RecordStore = Depends(get_record_store)
):
    """List reviews for a resort, newest first."""
    _require_resort(store, resort_id)
    return review_service.list_reviews(store, resort_id)


@router.post("/resorts/{resort_id}/reviews", response_model=ReviewSchema, status_code=status.HTTP_201_CREATED)
async def submit_review(
    resort_id: str,
    review: ReviewCreate,
    user: str = Depends(require_user),
    store: RecordStore = Depends(get_record_store)
):
    """Review a resort after a completed stay."""
    _require_resort(store, resort_id)
    
    try:
        return review_service.submit_review(store, resort_id, user, review)
    except ReviewNotAllowedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

"""Website settings and contact form API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from luxestays.backend.core.security import require_ceo
from luxestays.backend.schemas.website import (
    ContactMessage as ContactMessageSchema,
    ContactMessageCreate,
    WebsiteSettings,
    WebsiteSettingsUpdate,
)
from luxestays.backend.services.record_store import RecordStore, RecordStoreError, get_record_store
from luxestays.backend.services.website import WebsiteService

router = APIRouter()
website_service = WebsiteService()


@router.get("/website-settings", response_model=WebsiteSettings)
async def get_website_settings(
    store: RecordStore = Depends(get_record_store)
):
    """Public contact details and social links."""
    return website_service.get_settings(store)


@router.put("/website-settings", response_model=WebsiteSettings)
async def update_website_settings(
    update: WebsiteSettingsUpdate,
    operator: str = Depends(require_ceo),
    store: RecordStore = Depends(get_record_store)
):
    """Save website settings."""
    try:
        return website_service.update_settings(store, update, user=operator)
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("/contact-messages", response_model=ContactMessageSchema, status_code=status.HTTP_201_CREATED)
async def submit_contact_message(
    message: ContactMessageCreate,
    store: RecordStore = Depends(get_record_store)
):
    """Send a message through the contact form; no sign-in needed."""
    try:
        return website_service.submit_contact_message(store, message)
    except RecordStoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/contact-messages", response_model=List[ContactMessageSchema])
async def list_contact_messages(
    operator: str = Depends(require_ceo),
    store: RecordStore = Depends(get_record_store)
):
    """Contact form inbox, newest first."""
    return website_service.list_contact_messages(store)

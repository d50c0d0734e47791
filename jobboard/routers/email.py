"""
JobBoard - Email preference endpoints.

The unsubscribe link in every non-critical email lands here. The signed
token identifies the recipient and category, so no login is needed.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..schemas import EmailPreferencesResponse, JobAlertFrequency, UnsubscribeResponse
from ..services.email_preferences import get_or_create_email_preferences
from ..services.email_rate_limit import EmailCategory
from ..services.unsubscribe import UnsubscribeTokenError, verify_unsubscribe_token
from ..rate_limit import limiter, RATE_LIMIT_GENERAL

logger = logging.getLogger("jobboard.email")

router = APIRouter()


@router.get("/unsubscribe", response_model=UnsubscribeResponse)
@limiter.limit(RATE_LIMIT_GENERAL)
def unsubscribe(
    request: Request,
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db)
):
    """
    Unsubscribe the token's recipient from one email category.

    Application updates are switched off for important transactional email;
    job alerts are set to "never" for user notifications. Critical and
    system email cannot be unsubscribed from.
    """
    try:
        data = verify_unsubscribe_token(token)
    except UnsubscribeTokenError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if data.category == EmailCategory.CRITICAL_TRANSACTIONAL:
        raise HTTPException(status_code=400, detail="Critical emails cannot be unsubscribed from")
    if data.category == EmailCategory.SYSTEM:
        raise HTTPException(status_code=400, detail="System emails cannot be unsubscribed from")

    preferences = get_or_create_email_preferences(db, data.user_id)
    updated = False

    if data.category == EmailCategory.IMPORTANT_TRANSACTIONAL:
        if preferences.application_updates:
            preferences.application_updates = False
            updated = True
    elif data.category == EmailCategory.USER_NOTIFICATION:
        if preferences.job_alerts != JobAlertFrequency.NEVER.value:
            preferences.job_alerts = JobAlertFrequency.NEVER.value
            updated = True

    db.commit()
    db.refresh(preferences)

    if updated:
        logger.info("Unsubscribed %s from %s emails", data.user_id, data.category.value)
        message = "You have been unsubscribed"
    else:
        message = "You were already unsubscribed"

    return UnsubscribeResponse(
        message=message,
        category=data.category.value,
        updated=updated,
        preferences=EmailPreferencesResponse.model_validate(preferences),
    )

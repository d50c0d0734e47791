"""
JobBoard - CRUD API for job applications.

Endpoints for moving applications through the recruiter workflow, from
application through offer, hire, rejection or withdrawal. Status changes
that matter to the candidate trigger a notification email.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..database import get_db
from ..dependencies import get_status_notifier
from ..models import Application, utcnow
from ..schemas import (
    ApplicationCreate, ApplicationUpdate, ApplicationResponse,
    ApplicationUpdateResponse, ApplicationStatus, NotificationResult,
    TransitionInfo, normalize_status
)
from ..services.status_notifier import StatusNotifier
from ..services.status_transitions import (
    validate_transition, get_allowed_transitions, get_transition_description, is_terminal
)
from ..rate_limit import limiter, RATE_LIMIT_GENERAL, RATE_LIMIT_READ

logger = logging.getLogger("jobboard.applications")

router = APIRouter()


def _get_or_404(db: Session, application_id: int) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


def _current_status(application: Application) -> ApplicationStatus:
    status = normalize_status(application.status)
    if status is None:
        raise HTTPException(
            status_code=400,
            detail=f'Application has unrecognised status "{application.status}"'
        )
    return status


@router.get("/", response_model=List[ApplicationResponse])
@limiter.limit(RATE_LIMIT_READ)
def list_applications(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[ApplicationStatus] = None,
    candidate_email: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List applications, newest first, with optional filters."""
    query = db.query(Application)
    if status:
        query = query.filter(Application.status == status.value)
    if candidate_email:
        query = query.filter(Application.candidate_email == candidate_email)
    return query.order_by(Application.created_at.desc(), Application.id.desc()).offset(skip).limit(limit).all()


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: int,
    viewer: Optional[str] = Query(None, pattern="^(recruiter|candidate|admin)$"),
    db: Session = Depends(get_db)
):
    """
    Get a specific application.

    The first time a recruiter opens an application it is stamped as viewed,
    and an application still in "applied" moves to "viewed".
    """
    db_application = _get_or_404(db, application_id)

    if viewer == "recruiter" and not db_application.viewed_at:
        db_application.viewed_at = utcnow()
        current = normalize_status(db_application.status)
        if current == ApplicationStatus.APPLIED:
            error = validate_transition(current, ApplicationStatus.VIEWED)
            if error:
                logger.warning("Unexpected transition error on first view: %s", error)
            else:
                db_application.status = ApplicationStatus.VIEWED.value
        db.commit()
        db.refresh(db_application)

    return db_application


@router.get("/{application_id}/transitions", response_model=TransitionInfo)
def get_application_transitions(application_id: int, db: Session = Depends(get_db)):
    """List the statuses this application can move to next."""
    current = _current_status(_get_or_404(db, application_id))
    return TransitionInfo(
        status=current.value,
        terminal=is_terminal(current),
        allowed=[s.value for s in get_allowed_transitions(current)],
        description=get_transition_description(current),
    )


@router.post("/", response_model=ApplicationResponse)
@limiter.limit(RATE_LIMIT_GENERAL)
def create_application(
    request: Request,
    application: ApplicationCreate,
    db: Session = Depends(get_db)
):
    """Create a new application in the "applied" status."""
    now = utcnow()
    db_application = Application(
        **application.model_dump(),
        status=ApplicationStatus.APPLIED.value,
        applied_at=now,
        last_activity_at=now,
    )
    db.add(db_application)
    db.commit()
    db.refresh(db_application)
    return db_application


@router.patch("/{application_id}", response_model=ApplicationUpdateResponse)
@limiter.limit(RATE_LIMIT_GENERAL)
async def update_application(
    request: Request,
    application_id: int,
    update: ApplicationUpdate,
    db: Session = Depends(get_db),
    notifier: StatusNotifier = Depends(get_status_notifier)
):
    """
    Update an application's status, recruiter notes and/or visibility.

    Status changes are validated against the workflow. Once the change is
    saved the candidate may be emailed; email problems never fail the request.
    Toggling `published` only changes visibility: no email, no activity.
    """
    if update.status is None and update.recruiter_notes is None and update.published is None:
        raise HTTPException(
            status_code=400,
            detail="Either status, recruiter_notes, or published must be provided"
        )

    db_application = _get_or_404(db, application_id)
    status_changed = False

    if update.status is not None:
        new_status = update.status
        if new_status == ApplicationStatus.WITHDRAWN:
            raise HTTPException(
                status_code=400,
                detail="Cannot set status to withdrawn via this endpoint. Candidates must use the withdraw endpoint."
            )

        current = _current_status(db_application)
        error = validate_transition(current, new_status)
        if error:
            raise HTTPException(status_code=400, detail=error)

        db_application.status = new_status.value
        status_changed = current != new_status

    if update.recruiter_notes is not None:
        db_application.recruiter_notes = update.recruiter_notes

    if update.published is not None:
        db_application.published = update.published

    if status_changed or update.recruiter_notes is not None:
        db_application.last_activity_at = utcnow()
    db.commit()
    db.refresh(db_application)

    notification = None
    if status_changed:
        result = await notifier.notify_status_change(db_application)
        # Persist the notified status/time the notifier recorded
        db.commit()
        db.refresh(db_application)
        notification = NotificationResult(outcome=result.outcome.value, reason=result.reason)

    if status_changed and update.recruiter_notes is not None:
        message = "Application status and notes updated successfully"
    elif status_changed:
        message = "Application status updated successfully"
    elif update.recruiter_notes is not None:
        message = "Application notes updated successfully"
    elif update.published is not None:
        message = "Application published successfully" if update.published else "Application removed successfully"
    else:
        message = "Application updated successfully"

    return ApplicationUpdateResponse(
        message=message,
        application=ApplicationResponse.model_validate(db_application),
        notification=notification,
    )


@router.post("/{application_id}/withdraw", response_model=ApplicationResponse)
@limiter.limit(RATE_LIMIT_GENERAL)
def withdraw_application(
    request: Request,
    application_id: int,
    db: Session = Depends(get_db)
):
    """Withdraw an application on the candidate's behalf."""
    db_application = _get_or_404(db, application_id)
    current = _current_status(db_application)

    if current == ApplicationStatus.WITHDRAWN:
        raise HTTPException(status_code=400, detail="Application is already withdrawn")

    error = validate_transition(current, ApplicationStatus.WITHDRAWN)
    if error:
        raise HTTPException(status_code=400, detail=error)

    now = utcnow()
    db_application.status = ApplicationStatus.WITHDRAWN.value
    db_application.withdrawn_at = now
    db_application.last_activity_at = now
    db.commit()
    db.refresh(db_application)
    return db_application


@router.delete("/{application_id}")
@limiter.limit(RATE_LIMIT_GENERAL)
def delete_application(
    request: Request,
    application_id: int,
    db: Session = Depends(get_db)
):
    """Delete an application."""
    db_application = _get_or_404(db, application_id)
    db.delete(db_application)
    db.commit()
    return {"message": "Application deleted"}

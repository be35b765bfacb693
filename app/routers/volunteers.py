"""Volunteer assignments — create, report position, change status."""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.volunteer_assignment import VolunteerAssignment
from app.schemas.fleet_vehicle import LocationUpdate, StatusUpdate
from app.schemas.volunteer_assignment import AssignmentCreate, AssignmentOut
from app.services.change_feed import ChangeFeed, get_change_feed

router = APIRouter()

CLOSED_STATUSES = {"completed", "cancelled"}


def _get_assignment(db: Session, assignment_id: int) -> VolunteerAssignment:
    assignment = db.query(VolunteerAssignment).filter(VolunteerAssignment.id == assignment_id).first()
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


@router.get("/volunteers/assignments", response_model=list[AssignmentOut], summary="List volunteer assignments")
def list_assignments(status: str = None, db: Session = Depends(get_db)):
    q = db.query(VolunteerAssignment)
    if status:
        q = q.filter(VolunteerAssignment.status == status)
    return q.order_by(VolunteerAssignment.assigned_at.desc()).all()


@router.post("/volunteers/assignments", response_model=AssignmentOut, summary="Create an assignment")
async def create_assignment(body: AssignmentCreate, db: Session = Depends(get_db),
                            feed: ChangeFeed = Depends(get_change_feed)):
    assignment = VolunteerAssignment(
        volunteer_id=body.volunteer_id,
        operation_id=body.operation_id,
        status=body.status,
        current_location=body.current_location.model_dump() if body.current_location else None,
        assigned_at=datetime.utcnow(),
    )
    db.add(assignment)
    db.commit()
    feed.publish("volunteer_assignments")
    return assignment


@router.put("/volunteers/assignments/{assignment_id}/location", response_model=AssignmentOut,
            summary="Report volunteer position")
async def update_location(assignment_id: int, body: LocationUpdate, db: Session = Depends(get_db),
                          feed: ChangeFeed = Depends(get_change_feed)):
    assignment = _get_assignment(db, assignment_id)
    assignment.current_location = body.location.model_dump() if body.location else None
    db.commit()
    feed.publish("volunteer_assignments")
    return assignment


@router.put("/volunteers/assignments/{assignment_id}/status", response_model=AssignmentOut,
            summary="Change assignment status")
async def update_status(assignment_id: int, body: StatusUpdate, db: Session = Depends(get_db),
                        feed: ChangeFeed = Depends(get_change_feed)):
    assignment = _get_assignment(db, assignment_id)
    assignment.status = body.status
    if body.status in CLOSED_STATUSES:
        assignment.completed_at = datetime.utcnow()
    db.commit()
    feed.publish("volunteer_assignments")
    return assignment

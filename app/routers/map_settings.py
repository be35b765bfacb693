"""Map settings — read the operational boundary and update it."""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.map_settings import MapSettingsOut, MapSettingsUpdate
from app.services.boundary_store import ensure_default_settings, update_boundary
from app.services.change_feed import ChangeFeed, get_change_feed

router = APIRouter()


@router.get("/map-settings", response_model=MapSettingsOut, summary="Current map settings and boundary")
def get_settings(db: Session = Depends(get_db)):
    return ensure_default_settings(db)


@router.put("/map-settings", response_model=MapSettingsOut, summary="Update boundary / map view")
async def put_settings(body: MapSettingsUpdate, db: Session = Depends(get_db),
                       feed: ChangeFeed = Depends(get_change_feed)):
    """
    Replaces the operational boundary. Send `"boundary": null` to clear it
    (monitoring then treats every position as inside).
    """
    row = ensure_default_settings(db)
    if "boundary" in body.model_fields_set:
        row = update_boundary(db, body.boundary)

    view_fields = body.model_dump(exclude_unset=True, exclude={"boundary"})
    if view_fields:
        for key, value in view_fields.items():
            if value is None:
                raise HTTPException(status_code=422, detail=f"{key} cannot be null")
            setattr(row, key, value)
        row.updated_at = datetime.utcnow()
        db.commit()

    feed.publish("map_settings")
    return row

# app/services/alert_service.py
"""
Geofence alert persistence: deduplicated creation, listing, and the
acknowledge/resolve lifecycle.

Lifecycle: active → acknowledged, active → resolved. Nothing leaves
acknowledged or resolved. At most one active alert per entity is created
within GEOFENCE_DEDUP_WINDOW_SECONDS; this is a check-then-insert, not a
DB constraint.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models.geofence_alert import GeofenceAlert, ALERT_TYPES
from app.services.location_source import TrackedEntity
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

# target status → statuses it may be reached from
ALLOWED_TRANSITIONS = {
    "acknowledged": {"active"},
    "resolved": {"active"},
}


class AlertLifecycleError(Exception):
    pass


class AlertNotFoundError(AlertLifecycleError):
    def __init__(self, alert_id):
        super().__init__(f"Geofence alert {alert_id} not found")
        self.alert_id = alert_id


class AlertTransitionError(AlertLifecycleError):
    def __init__(self, alert_id, current, target):
        super().__init__(f"Geofence alert {alert_id} cannot go from {current} to {target}")
        self.alert_id = alert_id
        self.current = current
        self.target = target


def has_recent_alert(db: Session, entity_type: str, entity_id: str, now: datetime = None) -> bool:
    """True if the entity already has an active alert inside the dedup window."""
    now = now or datetime.utcnow()
    window = timedelta(seconds=settings.GEOFENCE_DEDUP_WINDOW_SECONDS)
    recent = db.query(GeofenceAlert.id).filter(
        GeofenceAlert.status == "active",
        GeofenceAlert.entity_id == entity_id,
        GeofenceAlert.entity_type == entity_type,
        GeofenceAlert.created_at >= now - window,
    ).first()
    return recent is not None


def create_alert_if_novel(db: Session, entity: TrackedEntity, alert_type: str = "exit",
                          now: datetime = None) -> Optional[GeofenceAlert]:
    """
    Persist a new active alert for `entity` unless one is already active
    within the dedup window. Returns the new alert, or None if suppressed.
    Storage errors are rolled back and re-raised.
    """
    if alert_type not in ALERT_TYPES:
        raise ValueError(f"Unknown alert type: {alert_type}")

    now = now or datetime.utcnow()
    if has_recent_alert(db, entity.entity_type, entity.entity_id, now):
        logger.info(f"[GEOFENCE] Suppressed duplicate {alert_type} alert for {entity.entity_type} {entity.label}")
        return None

    alert = GeofenceAlert(
        entity_type=entity.entity_type,
        entity_id=entity.entity_id,
        entity_label=entity.label,
        latitude=entity.lat,
        longitude=entity.lng,
        alert_type=alert_type,
        status="active",
        created_at=now,
    )
    try:
        db.add(alert)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.warning(f"[GEOFENCE][{alert_type.upper()}] {entity.type_name} {entity.label} "
                   f"at ({entity.lat:.5f}, {entity.lng:.5f})")
    return alert


def list_alerts(db: Session, status: str = None, entity_id: str = None, entity_type: str = None,
                created_after: datetime = None, limit: int = 50) -> list[GeofenceAlert]:
    """Persisted alerts, newest first, with optional filters."""
    q = db.query(GeofenceAlert)
    if status:
        q = q.filter(GeofenceAlert.status == status)
    if entity_id:
        q = q.filter(GeofenceAlert.entity_id == entity_id)
    if entity_type:
        q = q.filter(GeofenceAlert.entity_type == entity_type)
    if created_after:
        q = q.filter(GeofenceAlert.created_at >= created_after)
    return q.order_by(GeofenceAlert.created_at.desc(), GeofenceAlert.id.desc()).limit(limit).all()


def list_active_alerts(db: Session, limit: int = None) -> list[GeofenceAlert]:
    return list_alerts(db, status="active", limit=limit or settings.GEOFENCE_ACTIVE_ALERT_LIMIT)


def _transition(db: Session, alert_id: int, target: str, now: datetime) -> GeofenceAlert:
    alert = db.query(GeofenceAlert).filter(GeofenceAlert.id == alert_id).first()
    if not alert:
        raise AlertNotFoundError(alert_id)
    if alert.status not in ALLOWED_TRANSITIONS[target]:
        raise AlertTransitionError(alert_id, alert.status, target)

    alert.status = target
    if target == "acknowledged":
        alert.acknowledged_at = now
    else:
        alert.resolved_at = now

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"[GEOFENCE] Alert {alert_id} → {target}")
    return alert


def acknowledge_alert(db: Session, alert_id: int, now: datetime = None) -> GeofenceAlert:
    return _transition(db, alert_id, "acknowledged", now or datetime.utcnow())


def resolve_alert(db: Session, alert_id: int, now: datetime = None) -> GeofenceAlert:
    return _transition(db, alert_id, "resolved", now or datetime.utcnow())

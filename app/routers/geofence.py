"""
Geofence monitoring endpoints — active alerts, lifecycle actions,
containment check, manual sweep, and monitor on/off.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.schemas.geofence_alert import (
    GeofenceAlertOut, MonitoringToggle, MonitorStatusOut, SweepOut,
)
from app.services.alert_service import list_alerts
from app.services.change_feed import ChangeFeed, get_change_feed
from app.services.geofence_monitor import AlertActionResult, GeofenceMonitor, get_monitor

router = APIRouter()

_ERROR_STATUS = {
    "not_found": 404,
    "invalid_transition": 409,
    "storage_error": 503,
}


def _action_response(result: AlertActionResult, feed: ChangeFeed) -> dict:
    if not result.ok:
        raise HTTPException(status_code=_ERROR_STATUS[result.error], detail=result.detail)
    feed.publish("geofence_alerts")
    return {"id": result.alert_id, "status": result.status}


@router.get("/geofence/alerts", response_model=list[GeofenceAlertOut], summary="Active geofence alerts")
def get_active_alerts(monitor: GeofenceMonitor = Depends(get_monitor)):
    """The monitor's current active-alert list, newest first."""
    return monitor.alerts


@router.post("/geofence/alerts/refetch", response_model=list[GeofenceAlertOut], summary="Reload active alerts")
async def refetch_alerts(monitor: GeofenceMonitor = Depends(get_monitor)):
    return await monitor.refetch()


@router.get("/geofence/alerts/history", response_model=list[GeofenceAlertOut],
            summary="Stored geofence alerts — filterable")
def get_alert_history(
    status: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """All persisted alerts regardless of status. Filter by status or entity."""
    return list_alerts(db, status=status, entity_id=entity_id, entity_type=entity_type, limit=limit)


@router.put("/geofence/alerts/{alert_id}/acknowledge", summary="Acknowledge an active alert")
async def acknowledge_alert(alert_id: int, monitor: GeofenceMonitor = Depends(get_monitor),
                            feed: ChangeFeed = Depends(get_change_feed)):
    return _action_response(await monitor.acknowledge_alert(alert_id), feed)


@router.put("/geofence/alerts/{alert_id}/resolve", summary="Resolve an active alert")
async def resolve_alert(alert_id: int, monitor: GeofenceMonitor = Depends(get_monitor),
                        feed: ChangeFeed = Depends(get_change_feed)):
    return _action_response(await monitor.resolve_alert(alert_id), feed)


@router.get("/geofence/contains", summary="Is a point inside the operational boundary?")
def contains(lat: float = Query(..., ge=-90, le=90), lng: float = Query(..., ge=-180, le=180),
             monitor: GeofenceMonitor = Depends(get_monitor)):
    return {"lat": lat, "lng": lng, "inside": monitor.is_inside_bounds(lat, lng)}


@router.post("/geofence/sweep", response_model=SweepOut, summary="Run a sweep now")
async def trigger_sweep(monitor: GeofenceMonitor = Depends(get_monitor)):
    """Runs a sweep immediately. If one is already running, a re-run is queued instead."""
    result = await monitor.request_sweep()
    if result is None:
        return SweepOut(checked=0, exits=0, alerts_created=0, skipped="queued")
    return SweepOut(**vars(result))


@router.get("/geofence/status", response_model=MonitorStatusOut, summary="Monitor status")
def monitor_status(monitor: GeofenceMonitor = Depends(get_monitor)):
    return monitor.status()


@router.put("/geofence/monitoring", response_model=MonitorStatusOut, summary="Enable or disable monitoring")
async def set_monitoring(body: MonitoringToggle, monitor: GeofenceMonitor = Depends(get_monitor)):
    """Disabling ends the session: timer and subscriptions stop, remembered positions are cleared."""
    if body.enabled:
        await monitor.start()
    else:
        await monitor.stop()
    return monitor.status()

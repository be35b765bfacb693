# app/services/geofence_monitor.py
"""
Geofence monitor: watches active vehicles and volunteers and raises an
alert when one leaves the operational boundary.

A sweep reads the boundary and every active entity's position, classifies
each as inside/outside, and compares against the state remembered from the
previous sweep. Only an inside → outside change creates an alert (subject
to dedup). First sightings only record state.

Sweeps are triggered by:
  - start() (one immediate sweep)
  - a periodic timer (GEOFENCE_SWEEP_INTERVAL_SECONDS)
  - vehicle / volunteer change notifications from the change feed

At most one sweep runs at a time. Triggers arriving while a sweep is in
flight collapse into a single re-run once it finishes.

Storage failures never escape: a failed read aborts the sweep with state
untouched, a failed alert insert is logged and skipped. A sweep that
stores any alert reloads the active alert list before returning.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.schemas.geofence_alert import GeofenceAlertOut
from app.services import alert_service
from app.services.alert_service import AlertNotFoundError, AlertTransitionError
from app.services.boundary_store import get_boundary
from app.services.change_feed import ChangeFeed, change_feed as default_change_feed
from app.services.containment import Bounds, is_inside
from app.services.entity_state_tracker import EntityStateTracker, Transition
from app.services.location_source import TrackedEntity, list_tracked_entities
from app.services.notification_service import NotificationService, notifications as default_notifications
from app.utils.logger import get_logger

logger = get_logger(__name__)

ENTITY_TABLES = ("fleet_vehicles", "volunteer_assignments")
ALERT_TABLE = "geofence_alerts"
SETTINGS_TABLE = "map_settings"


@dataclass
class SweepResult:
    checked: int = 0
    exits: int = 0
    alerts_created: int = 0
    skipped: Optional[str] = None     # disabled | no_boundary | fetch_failed | stopped


@dataclass
class AlertActionResult:
    ok: bool
    alert_id: int
    status: Optional[str] = None
    error: Optional[str] = None       # not_found | invalid_transition | storage_error
    detail: Optional[str] = None


class GeofenceMonitor:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal,
                 notifier: NotificationService = None, feed: ChangeFeed = None,
                 interval_seconds: int = None, alert_limit: int = None):
        self._session_factory = session_factory
        self.notifier = notifier or default_notifications
        self.feed = feed or default_change_feed
        self.interval_seconds = interval_seconds or settings.GEOFENCE_SWEEP_INTERVAL_SECONDS
        self.alert_limit = alert_limit or settings.GEOFENCE_ACTIVE_ALERT_LIMIT

        self.tracker = EntityStateTracker()
        self._alerts: list[GeofenceAlertOut] = []
        self._boundary: Optional[Bounds] = None
        self._boundary_loaded = False

        self._enabled = False
        self._loading = False
        self._generation = 0          # bumped on stop(); sweeps from an older session stop writing
        self._sweep_running = False
        self._rerun_requested = False
        self._timer_task: Optional[asyncio.Task] = None
        self._unsubscribers: list[Callable[[], None]] = []

    # ── State exposed to the dashboard ───────────────────────────────────

    @property
    def alerts(self) -> list[GeofenceAlertOut]:
        return list(self._alerts)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def tracked_count(self) -> int:
        return len(self.tracker)

    def status(self) -> dict:
        return {
            "enabled": self._enabled,
            "loading": self._loading,
            "tracked_entities": len(self.tracker),
            "active_alerts": len(self._alerts),
            "boundary_configured": self._boundary is not None,
            "interval_seconds": self.interval_seconds,
        }

    # ── Session lifecycle ────────────────────────────────────────────────

    async def start(self):
        """Begin a monitoring session: subscribe, load alerts, sweep now, then every interval."""
        if self._enabled:
            return
        self._enabled = True

        for table in ENTITY_TABLES:
            self._unsubscribers.append(self.feed.subscribe(table, self._on_entities_changed))
        self._unsubscribers.append(self.feed.subscribe(ALERT_TABLE, self._on_alerts_changed))
        self._unsubscribers.append(self.feed.subscribe(SETTINGS_TABLE, self._on_settings_changed))

        await self.fetch_active_alerts()
        await self.request_sweep()

        self._timer_task = asyncio.create_task(self._run_periodic(), name="geofence-sweeper")
        logger.info(f"🛰️  Geofence monitoring started (every {self.interval_seconds}s)")

    async def stop(self):
        """End the session. An in-flight sweep finishes but stops recording state or alerts."""
        if not self._enabled and self._timer_task is None:
            return
        self._enabled = False
        self._generation += 1

        if self._timer_task:
            self._timer_task.cancel()
            try:
                await self._timer_task
            except asyncio.CancelledError:
                pass
            self._timer_task = None

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

        self.tracker.reset()
        logger.info("🛑 Geofence monitoring stopped")

    async def _run_periodic(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                # Cancelling the timer must not abort a sweep already under way
                await asyncio.shield(self.request_sweep())
            except Exception as e:
                logger.error(f"[GEOFENCE] Periodic sweep crashed: {e}", exc_info=True)

    async def _on_entities_changed(self, table: str):
        await self.request_sweep()

    async def _on_alerts_changed(self, table: str):
        await self.fetch_active_alerts()

    async def _on_settings_changed(self, table: str):
        self.reload_boundary()

    # ── Sweeping ─────────────────────────────────────────────────────────

    async def request_sweep(self) -> Optional[SweepResult]:
        """
        Run a sweep unless one is already running, in which case ask it to
        go around once more and return None.
        """
        if self._sweep_running:
            self._rerun_requested = True
            return None

        self._sweep_running = True
        try:
            result = await self.sweep()
            while self._rerun_requested:
                self._rerun_requested = False
                result = await self.sweep()
            return result
        finally:
            self._sweep_running = False

    async def sweep(self) -> SweepResult:
        """One pass over all candidate entities. Use request_sweep() for guarded triggering."""
        result = SweepResult()
        if not self._enabled:
            result.skipped = "disabled"
            return result

        generation = self._generation
        self._loading = True
        db = self._session_factory()
        try:
            try:
                boundary = get_boundary(db)
                self._boundary, self._boundary_loaded = boundary, True
                if boundary is None:
                    result.skipped = "no_boundary"
                    return result
                entities = list_tracked_entities(db)
            except SQLAlchemyError as e:
                logger.error(f"[GEOFENCE] Sweep aborted, could not read positions: {e}", exc_info=True)
                result.skipped = "fetch_failed"
                return result

            for entity in entities:
                if generation != self._generation:
                    result.skipped = "stopped"
                    break

                inside = is_inside(entity.lat, entity.lng, boundary)
                transition = self.tracker.classify(entity.key, inside)
                result.checked += 1

                if transition is Transition.EXIT:
                    result.exits += 1
                    if await self._raise_exit_alert(db, entity, generation):
                        result.alerts_created += 1

                if generation == self._generation:
                    self.tracker.record(entity.key, inside)
        finally:
            db.close()
            self._loading = False

        logger.debug(f"[GEOFENCE] Sweep: checked={result.checked} exits={result.exits} "
                     f"alerts={result.alerts_created}")

        # New alerts show up in the active list without waiting for a refetch
        if result.alerts_created and generation == self._generation:
            await self.fetch_active_alerts()
        return result

    async def _raise_exit_alert(self, db: Session, entity: TrackedEntity, generation: int) -> bool:
        if generation != self._generation:
            return False
        try:
            alert = alert_service.create_alert_if_novel(db, entity, "exit")
        except SQLAlchemyError as e:
            logger.error(f"[GEOFENCE] Could not store exit alert for {entity.label}: {e}", exc_info=True)
            return False

        if alert is None:
            return False

        await self.notifier.notify(
            "warning", f'🚨 {entity.type_name} "{entity.label}" has exited the operational area!'
        )
        return True

    # ── Boundary ─────────────────────────────────────────────────────────

    def reload_boundary(self) -> Optional[Bounds]:
        db = self._session_factory()
        try:
            self._boundary = get_boundary(db)
            self._boundary_loaded = True
        except SQLAlchemyError as e:
            logger.error(f"[GEOFENCE] Could not load boundary: {e}")
        finally:
            db.close()
        return self._boundary

    def is_inside_bounds(self, lat: float, lng: float) -> bool:
        """Containment against the currently loaded boundary."""
        if not self._boundary_loaded:
            self.reload_boundary()
        return is_inside(lat, lng, self._boundary)

    # ── Alerts ───────────────────────────────────────────────────────────

    async def fetch_active_alerts(self) -> list[GeofenceAlertOut]:
        """Reload the active alert list (newest first, bounded). Keeps the old list on failure."""
        db = self._session_factory()
        try:
            rows = alert_service.list_active_alerts(db, self.alert_limit)
            self._alerts = [GeofenceAlertOut.model_validate(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error(f"[GEOFENCE] Could not fetch active alerts: {e}")
        finally:
            db.close()
        return list(self._alerts)

    async def refetch(self) -> list[GeofenceAlertOut]:
        return await self.fetch_active_alerts()

    async def acknowledge_alert(self, alert_id: int) -> AlertActionResult:
        return await self._apply_lifecycle(alert_id, alert_service.acknowledge_alert, "acknowledge")

    async def resolve_alert(self, alert_id: int) -> AlertActionResult:
        return await self._apply_lifecycle(alert_id, alert_service.resolve_alert, "resolve")

    async def _apply_lifecycle(self, alert_id: int, action, verb: str) -> AlertActionResult:
        db = self._session_factory()
        try:
            alert = action(db, alert_id)
            result = AlertActionResult(ok=True, alert_id=alert_id, status=alert.status)
        except AlertNotFoundError as e:
            result = AlertActionResult(ok=False, alert_id=alert_id, error="not_found", detail=str(e))
        except AlertTransitionError as e:
            result = AlertActionResult(ok=False, alert_id=alert_id, status=e.current,
                                       error="invalid_transition", detail=str(e))
        except SQLAlchemyError as e:
            logger.error(f"[GEOFENCE] Could not {verb} alert {alert_id}: {e}", exc_info=True)
            result = AlertActionResult(ok=False, alert_id=alert_id, error="storage_error", detail=str(e))
        finally:
            db.close()

        # The active list only ever holds alerts whose stored status is active.
        # A storage error tells us nothing about the row, so the list stays as is.
        if result.error != "storage_error":
            self._alerts = [a for a in self._alerts if a.id != alert_id]

        if result.ok:
            await self.notifier.notify("success", f"Alert {verb}d")
        else:
            await self.notifier.notify("error", f"Failed to {verb} alert")
        return result


geofence_monitor = GeofenceMonitor()


def get_monitor() -> GeofenceMonitor:
    """FastAPI dependency."""
    return geofence_monitor

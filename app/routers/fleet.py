"""Fleet vehicles — minimal CRUD plus the position/status updates the geofence monitor reacts to."""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.fleet_vehicle import FleetVehicle
from app.schemas.fleet_vehicle import LocationUpdate, StatusUpdate, VehicleCreate, VehicleOut
from app.services.change_feed import ChangeFeed, get_change_feed

router = APIRouter()


def _get_vehicle(db: Session, vehicle_id: int) -> FleetVehicle:
    vehicle = db.query(FleetVehicle).filter(FleetVehicle.id == vehicle_id).first()
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


@router.get("/fleet/vehicles", response_model=list[VehicleOut], summary="List fleet vehicles")
def list_vehicles(status: str = None, db: Session = Depends(get_db)):
    q = db.query(FleetVehicle)
    if status:
        q = q.filter(FleetVehicle.status == status)
    return q.order_by(FleetVehicle.vehicle_number).all()


@router.post("/fleet/vehicles", response_model=VehicleOut, summary="Register a vehicle")
async def register_vehicle(body: VehicleCreate, db: Session = Depends(get_db),
                           feed: ChangeFeed = Depends(get_change_feed)):
    existing = db.query(FleetVehicle).filter(FleetVehicle.vehicle_number == body.vehicle_number).first()
    if existing:
        raise HTTPException(status_code=400, detail=f"Vehicle {body.vehicle_number} already registered")
    now = datetime.utcnow()
    vehicle = FleetVehicle(
        vehicle_number=body.vehicle_number,
        vehicle_type=body.vehicle_type,
        status=body.status,
        capacity=body.capacity,
        fuel_level=body.fuel_level,
        current_location=body.current_location.model_dump() if body.current_location else None,
        created_at=now,
        updated_at=now,
    )
    db.add(vehicle)
    db.commit()
    feed.publish("fleet_vehicles")
    return vehicle


@router.put("/fleet/vehicles/{vehicle_id}/location", response_model=VehicleOut, summary="Report vehicle position")
async def update_location(vehicle_id: int, body: LocationUpdate, db: Session = Depends(get_db),
                          feed: ChangeFeed = Depends(get_change_feed)):
    vehicle = _get_vehicle(db, vehicle_id)
    vehicle.current_location = body.location.model_dump() if body.location else None
    vehicle.updated_at = datetime.utcnow()
    db.commit()
    feed.publish("fleet_vehicles")
    return vehicle


@router.put("/fleet/vehicles/{vehicle_id}/status", response_model=VehicleOut, summary="Change vehicle status")
async def update_status(vehicle_id: int, body: StatusUpdate, db: Session = Depends(get_db),
                        feed: ChangeFeed = Depends(get_change_feed)):
    vehicle = _get_vehicle(db, vehicle_id)
    vehicle.status = body.status
    vehicle.updated_at = datetime.utcnow()
    db.commit()
    feed.publish("fleet_vehicles")
    return vehicle

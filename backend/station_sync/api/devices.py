from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from station_sync.core.time import as_utc
from station_sync.dependencies import get_db, require_admin
from station_sync.schemas.device import (
    AssignLicenseeRequest,
    AssignLicenseeResponse,
    ClaimRequest,
    ClaimResponse,
    DevicePublic,
    HeartbeatRequest,
    HeartbeatResponse,
    ProvisionRequest,
    ProvisionResponse,
)
from station_sync.services import device_service

router = APIRouter()

@router.post("/provision", response_model=ProvisionResponse, dependencies=[Depends(require_admin)])
async def provision_device_endpoint(request: ProvisionRequest, db: AsyncSession = Depends(get_db)):
    db_device = await device_service.provision_device(db, request.room_id, request.name)
    return ProvisionResponse(room_id=db_device.room_id, name=db_device.name, pairing_code=db_device.pairing_code)

@router.post("/claim", response_model=ClaimResponse)
async def claim_device_endpoint(request: ClaimRequest, db: AsyncSession = Depends(get_db)):
    db_device = await device_service.claim_device(db, request.pairing_code, request.device_id)
    return ClaimResponse(room_id=db_device.room_id, device_token=db_device.device_token)

@router.post("/heartbeat", response_model=HeartbeatResponse)
async def heartbeat_endpoint(request: HeartbeatRequest, db: AsyncSession = Depends(get_db)):
    db_device = await device_service.heartbeat(db, request.device_token)
    return HeartbeatResponse(room_id=db_device.room_id, last_seen=as_utc(db_device.last_seen))

@router.post("/assign-licensee", response_model=AssignLicenseeResponse, dependencies=[Depends(require_admin)])
async def assign_licensee_endpoint(request: AssignLicenseeRequest, db: AsyncSession = Depends(get_db)):
    db_device = await device_service.reassign_device(db, request.device_token, request.licensee_id, request.room_id)
    return AssignLicenseeResponse(device=DevicePublic.model_validate(db_device))

@router.post("/{room_id}/deactivate", response_model=DevicePublic, dependencies=[Depends(require_admin)])
async def deactivate_device_endpoint(room_id: str, db: AsyncSession = Depends(get_db)):
    return await device_service.deactivate_device(db, room_id)

@router.get("", response_model=List[DevicePublic], dependencies=[Depends(require_admin)])
async def read_devices(skip: int = 0, limit: int = 100, db: AsyncSession = Depends(get_db)):
    return await device_service.get_devices(db, skip=skip, limit=limit)

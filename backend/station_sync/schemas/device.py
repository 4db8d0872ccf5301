from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class ProvisionRequest(BaseModel):
    room_id: str
    name: Optional[str] = None

class ProvisionResponse(BaseModel):
    room_id: str
    name: str
    pairing_code: str

class ClaimRequest(BaseModel):
    pairing_code: str
    device_id: str

class ClaimResponse(BaseModel):
    room_id: str
    device_token: str

class HeartbeatRequest(BaseModel):
    # Se valida en el servicio para responder 401 y no 400
    device_token: Optional[str] = None

class HeartbeatResponse(BaseModel):
    ok: bool = True
    room_id: str
    last_seen: datetime

class AssignLicenseeRequest(BaseModel):
    device_token: str
    licensee_id: str
    room_id: Optional[str] = None

class DevicePublic(BaseModel):
    """Vista de administración de un dispositivo. Nunca incluye el device_token."""
    id: int
    room_id: str
    name: Optional[str] = None
    pairing_code: Optional[str] = None
    device_id: Optional[str] = None
    licensee_id: Optional[str] = None
    is_paired: bool
    active: bool
    last_seen: Optional[datetime] = None

    class Config:
        from_attributes = True

class AssignLicenseeResponse(BaseModel):
    device: DevicePublic

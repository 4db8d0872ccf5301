from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from station_sync.core.database import Base

class Device(Base):
    __tablename__ = "devices"
    id = Column(Integer, primary_key=True)
    # Un dispositivo por sala
    room_id = Column(String(64), unique=True, nullable=False)
    name = Column(String(100))

    # NULL una vez reclamado; UNIQUE es la red de seguridad contra colisiones
    pairing_code = Column(String(16), unique=True, nullable=True)
    device_token = Column(String(128), unique=True, nullable=False)

    # Identificador que reporta la unidad física al reclamar (auditoría)
    device_id = Column(String(128), nullable=True)
    licensee_id = Column(String(64), nullable=True, index=True)

    is_paired = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    last_seen = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

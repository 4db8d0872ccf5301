"""
Asociación sala -> licenciatario. Es la que decide qué lista de videos
permitidos se aplica al reproducir en una sala.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete
from typing import Iterable, List, Optional
from station_sync.core.errors import ConflictError, ValidationError
from station_sync.core.text import clean
from station_sync.models.licensee import LicenseeRoom

logger = logging.getLogger(__name__)

async def get_room_licensee(db: AsyncSession, room_id: str) -> Optional[str]:
    binding = await db.get(LicenseeRoom, clean(room_id))
    return binding.licensee_id if binding else None

async def get_rooms(db: AsyncSession, licensee_id: str) -> List[str]:
    result = await db.execute(
        select(LicenseeRoom.room_id)
        .where(LicenseeRoom.licensee_id == clean(licensee_id))
        .order_by(LicenseeRoom.room_id)
    )
    return list(result.scalars().all())

async def check_room_free(db: AsyncSession, licensee_id: str, room_id: str) -> None:
    """ConflictError si la sala ya está asignada a otro licenciatario."""
    owner = await get_room_licensee(db, room_id)
    if owner is not None and owner != licensee_id:
        raise ConflictError(f"Room {room_id} is assigned to another licensee")

async def set_room_licensee(db: AsyncSession, room_id: str, licensee_id: str) -> LicenseeRoom:
    """Reasigna la sala sin comprobar el dueño anterior. No hace commit."""
    binding = await db.get(LicenseeRoom, room_id)
    if binding is None:
        binding = LicenseeRoom(room_id=room_id, licensee_id=licensee_id)
        db.add(binding)
    else:
        binding.licensee_id = licensee_id
    return binding

async def add_room(db: AsyncSession, licensee_id: str, room_id: str) -> None:
    # Import local: session_service depende de este módulo
    from station_sync.services import session_service

    licensee_id = clean(licensee_id)
    room_id = clean(room_id)
    if not licensee_id:
        raise ValidationError("Missing licensee id")
    if not room_id:
        raise ValidationError("Missing room_id")

    await check_room_free(db, licensee_id, room_id)
    await set_room_licensee(db, room_id, licensee_id)
    await session_service.ensure_room_session(db, room_id)
    await db.commit()
    logger.info(f"Sala {room_id} asignada al licenciatario {licensee_id}")

async def replace_rooms(db: AsyncSession, licensee_id: str, rooms: Iterable[str]) -> List[str]:
    from station_sync.services import session_service

    licensee_id = clean(licensee_id)
    if not licensee_id:
        raise ValidationError("Missing licensee id")
    cleaned = sorted({clean(room) for room in rooms} - {""})

    for room_id in cleaned:
        await check_room_free(db, licensee_id, room_id)

    await db.execute(
        delete(LicenseeRoom).where(LicenseeRoom.licensee_id == licensee_id)
    )
    for room_id in cleaned:
        db.add(LicenseeRoom(room_id=room_id, licensee_id=licensee_id))
        await session_service.ensure_room_session(db, room_id)
    await db.commit()
    logger.info(f"Licenciatario {licensee_id}: {len(cleaned)} salas")
    return cleaned

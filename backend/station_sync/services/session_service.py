import logging
import math
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from typing import Optional
from station_sync.core.errors import NotFoundError, ValidationError
from station_sync.core.text import clean, normalize_label
from station_sync.core.time import utcnow
from station_sync.models.room_session import PlaybackState, RoomSession
from station_sync.services import access_service, catalog_service, licensee_service

logger = logging.getLogger(__name__)

SEEK_DELTA = "seek_delta"

async def ensure_room_session(db: AsyncSession, room_id: str) -> RoomSession:
    """
    Crea la sesión de la sala si todavía no existe. No hace commit: se llama
    dentro de la transacción de quien provisiona la sala.
    """
    db_session = await db.get(RoomSession, room_id)
    if db_session is None:
        db_session = RoomSession(
            room_id=room_id,
            state=PlaybackState.IDLE.value,
            command_id=0,
            updated_at=utcnow(),
        )
        db.add(db_session)
    return db_session

async def get_room_session(db: AsyncSession, room_id: str) -> RoomSession:
    db_session = await db.get(RoomSession, clean(room_id))
    if db_session is None:
        raise NotFoundError("Room not found")
    return db_session

async def _save(db: AsyncSession, db_session: RoomSession) -> RoomSession:
    db_session.updated_at = utcnow()
    await db.commit()
    await db.refresh(db_session)
    return db_session

async def play(db: AsyncSession, room_id: str, label: Optional[str]) -> RoomSession:
    """
    Carga y reproduce `label`. Válido desde cualquier estado; reproducir de
    nuevo tras una pausa reinicia started_at.
    """
    db_session = await get_room_session(db, room_id)

    label = normalize_label(label)
    if not label:
        raise ValidationError("Missing label")

    video = await catalog_service.get_active_video(db, label)
    if video is None:
        raise ValidationError(f"Unknown video label: {label}")

    licensee_id = await licensee_service.get_room_licensee(db, db_session.room_id)
    if licensee_id is not None:
        await access_service.ensure_allowed(db, licensee_id, label)

    db_session.state = PlaybackState.PLAYING.value
    db_session.playback_ref = label
    db_session.started_at = utcnow()
    db_session.paused_at = None
    db_session = await _save(db, db_session)
    logger.info(f"▶️ Sala {db_session.room_id}: reproduciendo {label}")
    return db_session

async def pause(db: AsyncSession, room_id: str) -> RoomSession:
    db_session = await get_room_session(db, room_id)

    if db_session.state != PlaybackState.PLAYING.value:
        # Permisivo a propósito: pausar fuera de 'playing' no falla ni cambia nada
        logger.info(f"Sala {db_session.room_id}: pausa ignorada en estado {db_session.state}")
        return db_session

    db_session.state = PlaybackState.PAUSED.value
    db_session.paused_at = utcnow()
    db_session = await _save(db, db_session)
    logger.info(f"⏸️ Sala {db_session.room_id}: en pausa")
    return db_session

async def stop(db: AsyncSession, room_id: str) -> RoomSession:
    db_session = await get_room_session(db, room_id)

    db_session.state = PlaybackState.STOPPED.value
    db_session.playback_ref = None
    db_session.started_at = None
    db_session.paused_at = None
    db_session = await _save(db, db_session)
    logger.info(f"⏹️ Sala {db_session.room_id}: detenida")
    return db_session

async def seek_delta(db: AsyncSession, room_id: str, value: Optional[float]) -> RoomSession:
    """
    Salto relativo en segundos. No toca state ni playback_ref: se guarda como
    último comando con un command_id nuevo y el reproductor lo aplica cuando
    lo ve al sondear. Dos saltos entre dos sondeos se ven como uno solo (el
    último); no hay garantía de entrega.
    """
    if value is None or not math.isfinite(value) or value == 0:
        raise ValidationError("Invalid seek_delta value")

    db_session = await get_room_session(db, room_id)

    stmt = (
        update(RoomSession)
        .where(RoomSession.room_id == db_session.room_id)
        .values(
            command_id=RoomSession.command_id + 1,
            command_type=SEEK_DELTA,
            command_value=value,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    await db.execute(stmt)
    await db.commit()
    await db.refresh(db_session)
    logger.info(f"⏩ Sala {db_session.room_id}: seek {value:+g}s (comando {db_session.command_id})")
    return db_session

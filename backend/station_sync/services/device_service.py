import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from station_sync.core.config import settings
from station_sync.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from station_sync.core.text import clean
from station_sync.core.time import utcnow, as_utc
from station_sync.models.device import Device
from station_sync.services import licensee_service, session_service
from station_sync.services.credentials import generate_device_token, generate_pairing_code, pairing_code_in_use

logger = logging.getLogger(__name__)

async def get_device_by_room(db: AsyncSession, room_id: str) -> Optional[Device]:
    result = await db.execute(
        select(Device).where(Device.room_id == room_id)
    )
    return result.scalars().first()

async def get_device_by_token(db: AsyncSession, device_token: str) -> Optional[Device]:
    result = await db.execute(
        select(Device).where(Device.device_token == device_token)
    )
    return result.scalars().first()

async def get_devices(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[Device]:
    result = await db.execute(
        select(Device).order_by(Device.id).offset(skip).limit(limit)
    )
    return result.scalars().all()

async def provision_device(db: AsyncSession, room_id: str, name: Optional[str] = None) -> Device:
    """
    Crea (o reprovisiona) el dispositivo de una sala con un código de
    emparejamiento nuevo. Reprovisionar rota código y token y deja el
    dispositivo sin emparejar.

    La comprobación previa del código solo acelera el caso común: la
    restricción UNIQUE de la tabla es la que garantiza la unicidad, y un
    IntegrityError en el commit consume un intento más del mismo presupuesto.
    """
    room_id = clean(room_id)
    if not room_id:
        raise ValidationError("Missing room_id")
    name = clean(name) or room_id

    max_attempts = settings.PAIRING_CODE_MAX_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        candidate = generate_pairing_code(settings.PAIRING_CODE_PREFIX)
        if await pairing_code_in_use(db, candidate):
            logger.debug(f"Colisión de código de emparejamiento para {room_id} (intento {attempt}/{max_attempts})")
            continue

        db_device = await get_device_by_room(db, room_id)
        if db_device is None:
            db_device = Device(room_id=room_id)
            db.add(db_device)

        db_device.name = name
        db_device.pairing_code = candidate
        db_device.device_token = generate_device_token(settings.DEVICE_TOKEN_BYTES)
        db_device.is_paired = False
        db_device.active = True
        db_device.last_seen = None

        await session_service.ensure_room_session(db, room_id)

        try:
            await db.commit()
        except IntegrityError:
            # Otra solicitud concurrente se llevó el código (o creó la sala) antes que nosotros
            await db.rollback()
            logger.warning(f"Conflicto de unicidad al provisionar {room_id} (intento {attempt}/{max_attempts})")
            continue

        await db.refresh(db_device)
        logger.info(f"📟 Dispositivo provisionado para la sala {room_id}")
        return db_device

    logger.error(f"❌ Sin código de emparejamiento único para {room_id} tras {max_attempts} intentos")
    raise ConflictError("Could not generate unique pairing code")

async def claim_device(db: AsyncSession, pairing_code: str, device_id: str) -> Device:
    """
    Empareja la unidad física con la sala usando el código. El código queda
    gastado (NULL) y solo una reclamación puede tener éxito: la actualización
    es condicional a que el dispositivo siga sin emparejar.
    """
    pairing_code = clean(pairing_code)
    device_id = clean(device_id)
    if not pairing_code or not device_id:
        raise ValidationError("Missing pairing_code or device_id")

    result = await db.execute(
        select(Device).where(
            Device.pairing_code == pairing_code,
            Device.active == True,
            Device.is_paired == False,
        )
    )
    db_device = result.scalars().first()
    if db_device is None:
        raise NotFoundError("Invalid pairing code")

    stmt = (
        update(Device)
        .where(
            Device.id == db_device.id,
            Device.pairing_code == pairing_code,
            Device.is_paired == False,
        )
        .values(
            device_id=device_id,
            device_token=generate_device_token(settings.DEVICE_TOKEN_BYTES),
            pairing_code=None,
            is_paired=True,
            last_seen=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    updated = await db.execute(stmt)
    if updated.rowcount != 1:
        await db.rollback()
        raise NotFoundError("Invalid pairing code")

    await db.commit()
    await db.refresh(db_device)
    logger.info(f"🔗 Sala {db_device.room_id} emparejada con la unidad {device_id}")
    return db_device

async def heartbeat(db: AsyncSession, device_token: Optional[str]) -> Device:
    device_token = clean(device_token)
    if not device_token:
        raise AuthError("Missing device_token")

    result = await db.execute(
        select(Device).where(Device.device_token == device_token, Device.active == True)
    )
    db_device = result.scalars().first()
    if db_device is None:
        raise AuthError("Invalid device_token")

    # last_seen nunca retrocede, aunque el reloj del servidor lo haga
    now = utcnow()
    previous = as_utc(db_device.last_seen)
    if previous is not None and previous > now:
        now = previous

    db_device.last_seen = now
    await db.commit()
    await db.refresh(db_device)
    return db_device

async def reassign_device(db: AsyncSession, device_token: str, licensee_id: str, room_id: Optional[str] = None) -> Device:
    device_token = clean(device_token)
    licensee_id = clean(licensee_id)
    if not device_token:
        raise ValidationError("Missing device_token")
    if not licensee_id:
        raise ValidationError("Missing licensee_id")

    db_device = await get_device_by_token(db, device_token)
    if db_device is None:
        raise NotFoundError("Device not found for that device_token")

    target_room = db_device.room_id
    if room_id is not None:
        room_id = clean(room_id)
        if not room_id:
            raise ValidationError("room_id cannot be empty")
        if room_id != db_device.room_id and await get_device_by_room(db, room_id) is not None:
            raise ConflictError(f"Room {room_id} already has a device")
        target_room = room_id

    # La sala destino no puede pertenecer a otro licenciatario
    await licensee_service.check_room_free(db, licensee_id, target_room)

    db_device.room_id = target_room
    db_device.licensee_id = licensee_id
    await session_service.ensure_room_session(db, db_device.room_id)
    await licensee_service.set_room_licensee(db, db_device.room_id, licensee_id)

    try:
        await db.commit()
    except IntegrityError:
        # Otra solicitud ocupó la sala entre la comprobación y el commit
        await db.rollback()
        raise ConflictError("Room already has a device")

    await db.refresh(db_device)
    logger.info(f"Dispositivo {db_device.id} asignado a {licensee_id} en la sala {db_device.room_id}")
    return db_device

async def deactivate_device(db: AsyncSession, room_id: str) -> Device:
    db_device = await get_device_by_room(db, clean(room_id))
    if db_device is None:
        raise NotFoundError("Device not found")
    db_device.active = False
    await db.commit()
    await db.refresh(db_device)
    logger.info(f"Dispositivo de la sala {db_device.room_id} desactivado")
    return db_device

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete
from typing import Iterable, Set
from station_sync.core.errors import ValidationError
from station_sync.core.text import clean, normalize_label
from station_sync.models.licensee import LicenseeVideoAccess

logger = logging.getLogger(__name__)

def _require_licensee(licensee_id: str) -> str:
    licensee_id = clean(licensee_id)
    if not licensee_id:
        raise ValidationError("Missing licensee id")
    return licensee_id

async def get_allowed(db: AsyncSession, licensee_id: str) -> Set[str]:
    licensee_id = _require_licensee(licensee_id)
    result = await db.execute(
        select(LicenseeVideoAccess.video_label).where(LicenseeVideoAccess.licensee_id == licensee_id)
    )
    return set(result.scalars().all())

async def replace_allowed(db: AsyncSession, licensee_id: str, labels: Iterable[str]) -> Set[str]:
    """
    Reemplaza la lista completa en una sola transacción. Dos reemplazos
    concurrentes no se mezclan: gana el último commit.
    """
    licensee_id = _require_licensee(licensee_id)
    normalized = {normalize_label(label) for label in labels}
    normalized.discard("")

    await db.execute(
        delete(LicenseeVideoAccess).where(LicenseeVideoAccess.licensee_id == licensee_id)
    )
    db.add_all(
        LicenseeVideoAccess(licensee_id=licensee_id, video_label=label)
        for label in sorted(normalized)
    )
    await db.commit()
    logger.info(f"Licenciatario {licensee_id}: {len(normalized)} videos permitidos")
    return normalized

async def add_allowed(db: AsyncSession, licensee_id: str, label: str) -> None:
    licensee_id = _require_licensee(licensee_id)
    label = normalize_label(label)
    if not label:
        raise ValidationError("Missing video_label")

    if await db.get(LicenseeVideoAccess, (licensee_id, label)) is not None:
        return
    db.add(LicenseeVideoAccess(licensee_id=licensee_id, video_label=label))
    await db.commit()

async def remove_allowed(db: AsyncSession, licensee_id: str, label: str) -> None:
    licensee_id = _require_licensee(licensee_id)
    label = normalize_label(label)
    if not label:
        raise ValidationError("Missing video_label")

    await db.execute(
        delete(LicenseeVideoAccess).where(
            LicenseeVideoAccess.licensee_id == licensee_id,
            LicenseeVideoAccess.video_label == label,
        )
    )
    await db.commit()

async def ensure_allowed(db: AsyncSession, licensee_id: str, label: str) -> None:
    label = normalize_label(label)
    if label not in await get_allowed(db, licensee_id):
        raise ValidationError(f"Video {label} is not allowed for this licensee")

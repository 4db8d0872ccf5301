import secrets
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from station_sync.models.device import Device

PAIRING_CODE_DIGITS = 4

def generate_pairing_code(prefix: str) -> str:
    """
    Código corto para introducir a mano: prefijo + 4 dígitos (10.000 valores).
    El espacio es pequeño, así que quien lo emite debe comprobar colisiones.
    """
    suffix = secrets.randbelow(10 ** PAIRING_CODE_DIGITS)
    return f"{prefix}{suffix:0{PAIRING_CODE_DIGITS}d}"

def generate_device_token(nbytes: int) -> str:
    return secrets.token_hex(nbytes)

async def pairing_code_in_use(db: AsyncSession, code: str) -> bool:
    # Los códigos reclamados quedan en NULL, así que solo hay códigos sin reclamar
    result = await db.execute(
        select(Device.id).where(Device.pairing_code == code)
    )
    return result.scalars().first() is not None

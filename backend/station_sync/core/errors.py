"""
Errores de dominio. Cada uno lleva el código HTTP con el que se responde
y se serializa siempre como {"error": <mensaje>}.
"""


class StationSyncError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(StationSyncError):
    """Credencial ausente o inválida (token de dispositivo o clave de admin)."""
    status_code = 401


class ValidationError(StationSyncError):
    """Entrada mal formada o no permitida (campo faltante, etiqueta fuera de la lista)."""
    status_code = 400


class NotFoundError(StationSyncError):
    status_code = 404


class ConflictError(StationSyncError):
    """Agotado el presupuesto de reintentos o recurso ya asignado a otro dueño."""
    status_code = 409


class StoreError(StationSyncError):
    status_code = 500

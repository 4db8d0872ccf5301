"""
Cliente del lado de los puntos finales (reproductor y superficie de control).

No hay canal push: el estado de la sala se lee con GET cada
POLL_INTERVAL_SECONDS. Cualquier vista puede ir hasta un intervalo por
detrás, y un seek puede perderse si llegan dos entre dos sondeos (solo se
ve el último command_id).
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx
import typer

from station_sync.core.config import settings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Campos que definen el estado duradero; updated_at y command_* no cuentan
STATE_FIELDS = ("state", "playback_ref", "started_at", "paused_at")


class StationClientError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StationClient:
    """Envoltorio fino sobre httpx para la API de salas y dispositivos."""

    def __init__(self, base_url: str, admin_key: Optional[str] = None, http: Optional[httpx.Client] = None, timeout: float = 5.0):
        headers = {"X-Admin-Key": admin_key} if admin_key else {}
        self.http = http or httpx.Client(base_url=base_url, headers=headers, timeout=timeout)

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> Optional[Dict[str, Any]]:
        response = self.http.request(method, f"{API_PREFIX}{path}", **kwargs)
        if response.is_error:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            raise StationClientError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def provision(self, room_id: str, name: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/devices/provision", json={"room_id": room_id, "name": name})

    def claim(self, pairing_code: str, device_id: str) -> Dict[str, Any]:
        return self._request("POST", "/devices/claim", json={"pairing_code": pairing_code, "device_id": device_id})

    def heartbeat(self, device_token: str) -> Dict[str, Any]:
        return self._request("POST", "/devices/heartbeat", json={"device_token": device_token})

    def get_state(self, room_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/sessions/{room_id}")

    def send_command(self, room_id: str, command: str, **fields) -> Dict[str, Any]:
        return self._request("POST", f"/sessions/{room_id}/commands", json={"command": command, **fields})


@dataclass
class PollUpdate:
    session: Dict[str, Any]
    state_changed: bool
    command: Optional[Dict[str, Any]] = None


class PollSyncClient:
    def __init__(
        self,
        client: StationClient,
        room_id: str,
        interval: Optional[float] = None,
        max_backoff: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.room_id = room_id
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SECONDS
        self.max_backoff = max_backoff if max_backoff is not None else settings.POLL_MAX_BACKOFF_SECONDS
        self.sleep = sleep
        self._last_state: Optional[tuple] = None
        self._last_command_id: Optional[int] = None

    def poll_once(self) -> PollUpdate:
        session = self.client.get_state(self.room_id)

        snapshot = tuple(session.get(field) for field in STATE_FIELDS)
        state_changed = snapshot != self._last_state
        self._last_state = snapshot

        # El primer sondeo fija la referencia: un seek anterior a la conexión no se reaplica
        command = None
        command_id = session.get("command_id") or 0
        if self._last_command_id is not None and command_id > self._last_command_id:
            command = {
                "command_id": command_id,
                "command_type": session.get("command_type"),
                "command_value": session.get("command_value"),
            }
        self._last_command_id = command_id

        return PollUpdate(session=session, state_changed=state_changed, command=command)

    def run(self, on_update: Callable[[PollUpdate], None], max_polls: Optional[int] = None) -> None:
        """
        Sondea a intervalo fijo y llama a `on_update` cuando cambia el estado
        o aparece un comando nuevo. Los errores de red o del servidor se
        registran y se reintenta con espera exponencial acotada.
        """
        polls = 0
        delay = self.interval
        while max_polls is None or polls < max_polls:
            polls += 1
            try:
                update = self.poll_once()
            except (httpx.HTTPError, StationClientError) as e:
                delay = min(max(delay, self.interval) * 2, self.max_backoff)
                logger.warning(f"Sondeo de {self.room_id} falló ({e}); reintento en {delay:.1f}s")
            else:
                delay = self.interval
                if update.state_changed or update.command:
                    on_update(update)
            if max_polls is None or polls < max_polls:
                self.sleep(delay)


cli = typer.Typer()


@cli.command()
def poll(
    room_id: str,
    base_url: str = typer.Option("http://localhost:8000", envvar="STATION_SYNC_URL"),
    interval: float = typer.Option(settings.POLL_INTERVAL_SECONDS),
    max_polls: Optional[int] = typer.Option(None),
) -> None:
    """Sigue el estado de una sala e imprime cada cambio."""
    logging.basicConfig(level=settings.LOG_LEVEL)
    client = StationClient(base_url)

    def report(update: PollUpdate) -> None:
        session = update.session
        if update.state_changed:
            typer.echo(f"{session['room_id']}: {session['state']} {session.get('playback_ref') or '-'}")
        if update.command:
            typer.echo(f"{session['room_id']}: {update.command['command_type']} {update.command['command_value']:+g}")

    try:
        PollSyncClient(client, room_id, interval=interval).run(report, max_polls=max_polls)
    finally:
        client.close()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

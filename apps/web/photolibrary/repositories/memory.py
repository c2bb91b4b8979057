"""In-memory authorized-client store used by the app and tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from threading import Lock

from photolibrary.adapters.auth.base import AuthorizedClientService
from photolibrary.schemas.auth import AuthorizedClient

_EXPIRY_LEEWAY = timedelta(seconds=30)


class InMemoryAuthorizedClientService(AuthorizedClientService):
    """Authorized clients keyed by ``(registration_id, principal_name)``.

    Records whose access token expires within the leeway window are treated
    as absent and evicted on lookup.
    """

    def __init__(self, *, clock=None) -> None:
        self._clients: dict[tuple[str, str], AuthorizedClient] = {}
        self._lock = Lock()
        self._clock = clock or (lambda: datetime.now(UTC))
        self.write_count = 0

    def find_authorized_client(self, registration_id: str, principal_name: str) -> AuthorizedClient | None:
        key = (registration_id, principal_name)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                return None
            if client.expires_at is not None and client.expires_at - _EXPIRY_LEEWAY <= self._clock():
                del self._clients[key]
                return None
            return client

    def save_authorized_client(self, client: AuthorizedClient) -> None:
        with self._lock:
            self._clients[(client.registration_id, client.principal_name)] = client
            self.write_count += 1

    def remove_authorized_client(self, registration_id: str, principal_name: str) -> None:
        with self._lock:
            if self._clients.pop((registration_id, principal_name), None) is not None:
                self.write_count += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

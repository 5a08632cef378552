"""Client registry.

Populated by explicit, ordered registration during startup composition and
then frozen. Lookups are only allowed once the registry is frozen, so every
caller sees the same complete, immutable set of clients.
"""

from sx.assets.types import AssetType
from sx.clients.client import Client
from sx.core.errors import RegistryError, RegistryFrozenError, UnknownClientError


class ClientRegistry:
    def __init__(self) -> None:
        self._clients: dict[str, Client] = {}
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def register(self, client: Client) -> None:
        """Add a client. Registration order is the order `all()` returns.

        Raises:
            RegistryFrozenError: If the registry is already frozen
            RegistryError: If a client with the same ID is registered
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"cannot register {client.client_id}: client registry is frozen"
            )
        if client.client_id in self._clients:
            raise RegistryError(f"client already registered: {client.client_id}")
        self._clients[client.client_id] = client

    def freeze(self) -> None:
        self._frozen = True

    def _require_frozen(self) -> None:
        if not self._frozen:
            raise RegistryError("client registry used before it was frozen")

    def get(self, client_id: str) -> Client:
        """Look up a client by ID.

        Raises:
            UnknownClientError: If no client has this ID
        """
        self._require_frozen()
        if client_id not in self._clients:
            raise UnknownClientError(client_id)
        return self._clients[client_id]

    def all(self) -> list[Client]:
        self._require_frozen()
        return list(self._clients.values())

    def ids(self) -> list[str]:
        self._require_frozen()
        return list(self._clients)

    def detect_installed(self) -> list[Client]:
        """Clients whose tool appears to be installed, in registration order."""
        return [client for client in self.all() if client.is_installed()]

    def filter_by_asset_type(self, asset_type: AssetType) -> list[Client]:
        return [client for client in self.all() if client.supports_asset_type(asset_type)]

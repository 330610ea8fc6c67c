"""Server handles used by benchmark tests to provision and tear down mounts."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

import hvac
import requests
from hvac.exceptions import VaultError

TOKEN_HEADER = "X-Vault-Token"
NAMESPACE_HEADER = "X-Vault-Namespace"


class ServerError(RuntimeError):
    """Raised when the server rejects a request or cannot be reached."""


@runtime_checkable
class ServerHandle(Protocol):
    """Protocol implemented by secrets-management server handles."""

    @property
    def address(self) -> str:
        """Base URL of the server, without a trailing slash."""

    def headers(self) -> dict[str, str]:
        """Headers that authenticate requests made by the load driver."""

    def mount(self, path: str, backend_type: str) -> None:
        """Enable a secrets backend of ``backend_type`` at ``path``."""

    def write(self, path: str, data: Mapping[str, Any]) -> None:
        """Write key/value data to a logical path."""

    def delete(self, path: str) -> None:
        """Delete a logical path."""


class HvacServer:
    """Server handle backed by an ``hvac.Client``."""

    def __init__(
        self,
        address: str,
        token: str,
        *,
        namespace: str | None = None,
        verify: bool | str = True,
        timeout: float = 30.0,
        client: hvac.Client | None = None,
    ) -> None:
        self._address = address.rstrip("/")
        self._token = token
        self._namespace = namespace or None
        self._client = client or hvac.Client(
            url=self._address,
            token=token,
            namespace=self._namespace,
            verify=verify,
            timeout=timeout,
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def client(self) -> hvac.Client:
        return self._client

    def headers(self) -> dict[str, str]:
        headers = {TOKEN_HEADER: self._token}
        if self._namespace:
            headers[NAMESPACE_HEADER] = self._namespace
        return headers

    def mount(self, path: str, backend_type: str) -> None:
        try:
            self._client.sys.enable_secrets_engine(backend_type=backend_type, path=path)
        except (VaultError, requests.RequestException) as exc:
            raise ServerError(f"failed to mount {backend_type!r} at {path!r}: {exc}") from exc

    def write(self, path: str, data: Mapping[str, Any]) -> None:
        try:
            self._client.write_data(path, data=dict(data))
        except (VaultError, requests.RequestException) as exc:
            raise ServerError(f"failed to write {path!r}: {exc}") from exc

    def delete(self, path: str) -> None:
        try:
            self._client.adapter.delete(f"/v1/{path.lstrip('/')}")
        except (VaultError, requests.RequestException) as exc:
            raise ServerError(f"failed to delete {path!r}: {exc}") from exc


__all__ = ["HvacServer", "NAMESPACE_HEADER", "ServerError", "ServerHandle", "TOKEN_HEADER"]

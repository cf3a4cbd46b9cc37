"""
HTTP State Store.

Remote API persistence over httpx:

    PUT {base_url}/api/version-control/{workspace_id}   body: serialized state
    GET {base_url}/api/version-control/{workspace_id}   404 -> nothing saved

A failed save is logged and reported as False; the engine keeps its
in-memory state regardless.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from wvc.domain.interfaces.state_store import IStateStore
from wvc.domain.models import InvalidSnapshotError

logger = logging.getLogger(__name__)


class HttpStateStore(IStateStore):
    """
    Remote implementation of IStateStore.

    Args:
        base_url: Server root, e.g. ``https://example.org``
        workspace_id: Workspace key in the URL path
        timeout: Request timeout in seconds
        client: Pre-built httpx.Client (takes precedence over base_url/timeout)
    """

    def __init__(
        self,
        base_url: str,
        workspace_id: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self._workspace_id = workspace_id
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    @property
    def endpoint(self) -> str:
        return f"/api/version-control/{self._workspace_id}"

    @property
    def description(self) -> str:
        return f"HttpStateStore({self._client.base_url}{self.endpoint})"

    def save(self, data: Dict[str, Any]) -> bool:
        try:
            response = self._client.put(self.endpoint, json=data)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to save state to server: {e}")
            return False
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Fetch the saved state.

        Returns:
            Serialized state, or None on 404

        Raises:
            httpx.HTTPError: On transport failures or other error statuses
            InvalidSnapshotError: If the body is not a JSON object
        """
        response = self._client.get(self.endpoint)
        if response.status_code == 404:
            return None
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidSnapshotError(f"Server returned non-JSON state: {e}") from e
        if not isinstance(data, dict):
            raise InvalidSnapshotError("Server returned a state that is not a JSON object")
        return data

    def clear(self) -> None:
        response = self._client.delete(self.endpoint)
        if response.status_code != 404:
            response.raise_for_status()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpStateStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

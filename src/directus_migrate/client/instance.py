"""Client for the schema endpoints of a single Directus instance.

Directus exposes schema migration as three calls:
1. GET  /schema/snapshot          -> {"data": <snapshot>}
2. POST /schema/diff[?force=true] -> {"data": <diff>}
3. POST /schema/apply             -> 204 No Content

The static token travels in the access_token query parameter.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from directus_migrate.errors import (
    MalformedEnvelopeError,
    RemoteRejectionError,
    SerializationError,
    TransportError,
)
from directus_migrate.models.connection import Connection
from directus_migrate.models.envelope import Diff, Envelope, Snapshot

logger = logging.getLogger(__name__)


class DirectusClient:
    """
    Performs snapshot, diff and apply against one instance.
    Owns its httpx client unless one is injected.
    """

    SNAPSHOT_PATH = "/schema/snapshot"
    DIFF_PATH = "/schema/diff"
    APPLY_PATH = "/schema/apply"

    JSON_HEADERS = {"Content-Type": "application/json"}

    # Applying a large schema can take well past the httpx 5s default
    DEFAULT_TIMEOUT = 30.0

    def __init__(self, url: str, token: str, *, client: Optional[httpx.Client] = None):
        """
        Args:
            url: Base address of the instance
            token: Static access token
            client: Optional httpx client (tests pass one with a MockTransport)
        """
        self.connection = Connection(url=url, token=token)
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self.DEFAULT_TIMEOUT)

    @classmethod
    def from_connection(
        cls, connection: Connection, client: Optional[httpx.Client] = None
    ) -> "DirectusClient":
        return cls(connection.url, connection.token, client=client)

    @property
    def url(self) -> str:
        return self.connection.url

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DirectusClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DirectusClient(url={self.url!r})"

    def get_snapshot(self) -> Snapshot:
        """Retrieve the current schema snapshot."""
        resp = self._send("snapshot", "GET", self.SNAPSHOT_PATH)
        return self._unwrap("snapshot", resp, expected_status=200)

    def get_diff(self, snapshot: Snapshot, force: bool = False) -> Diff:
        """
        Ask the instance for the changes needed to match snapshot.
        force=True makes Directus compute the diff even across version mismatches.
        """
        params = {"force": "true"} if force else None
        body = self._encode("snapshot", snapshot)
        resp = self._send("diff", "POST", self.DIFF_PATH, params=params, content=body)
        return self._unwrap("diff", resp, expected_status=200)

    def apply_diff(self, diff: Diff) -> None:
        """Apply a diff previously returned by get_diff. Only 204 counts as success."""
        body = self._encode("diff", diff)
        resp = self._send("apply", "POST", self.APPLY_PATH, content=body)
        self._check_status("apply", resp, expected_status=204)

    def _encode(self, what: str, payload: Any) -> bytes:
        try:
            return json.dumps(payload, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"failed to marshal {what} for request: {e}") from e

    def _send(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """Send one request; the token is always the first query parameter."""
        query = {"access_token": self.connection.token}
        if params:
            query.update(params)
        headers = self.JSON_HEADERS if content is not None else None

        logger.debug("%s %s%s (params=%s)", method, self.url, path, sorted(params or {}))
        try:
            return self._client.request(
                method,
                self.url + path,
                params=query,
                content=content,
                headers=headers,
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise TransportError(f"failed to execute {operation} request: {e}") from e

    def _check_status(self, operation: str, resp: httpx.Response, *, expected_status: int) -> None:
        if resp.status_code != expected_status:
            raise RemoteRejectionError(operation, resp.status_code, resp.text)

    def _unwrap(self, operation: str, resp: httpx.Response, *, expected_status: int) -> dict[str, Any]:
        """Check status, then return the 'data' object of the envelope."""
        self._check_status(operation, resp, expected_status=expected_status)

        try:
            body = resp.json()
        except ValueError as e:
            raise MalformedEnvelopeError(f"failed to decode {operation} response: {e}") from e

        if not isinstance(body, dict) or "data" not in body:
            raise MalformedEnvelopeError(f"{operation} response does not contain 'data' field")

        try:
            return Envelope.model_validate(body).data
        except ValidationError as e:
            raise MalformedEnvelopeError(
                f"{operation} response 'data' field is not an object"
            ) from e

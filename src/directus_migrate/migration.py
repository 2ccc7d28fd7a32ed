"""Migration orchestration: snapshot (base) → diff (target) → apply (target)."""

import enum
import logging
from typing import Optional

import httpx

from directus_migrate.client.instance import DirectusClient
from directus_migrate.errors import DirectusMigrateError, MigrationError
from directus_migrate.models.connection import Connection

logger = logging.getLogger(__name__)


class MigrationState(str, enum.Enum):
    """Where a SchemaMigrator is in its single pass. FAILED is terminal."""

    SNAPSHOT_PENDING = "snapshot_pending"
    DIFF_PENDING = "diff_pending"
    APPLY_PENDING = "apply_pending"
    DONE = "done"
    FAILED = "failed"


_FAILURE_CONTEXT = {
    MigrationState.SNAPSHOT_PENDING: "failed to get snapshot",
    MigrationState.DIFF_PENDING: "failed to get diff",
    MigrationState.APPLY_PENDING: "failed to apply diff",
}


class SchemaMigrator:
    """
    Copies the schema of a base instance onto a target instance.
    Fail-fast and non-transactional: the first failing step ends the run,
    and nothing already done is undone.
    """

    def __init__(self, base: DirectusClient, target: DirectusClient):
        self.base = base
        self.target = target
        self.state = MigrationState.SNAPSHOT_PENDING

    def run(self, force: bool = False) -> None:
        """
        Run the three steps in order. Raises MigrationError labelled with the
        failing step; the client error stays reachable via __cause__.
        """
        if self.state != MigrationState.SNAPSHOT_PENDING:
            raise RuntimeError(f"Migrator already ran (state={self.state.value})")

        logger.info("Retrieving snapshot from base project...")
        snapshot = self._step(self.base.get_snapshot)
        logger.info("Snapshot retrieved successfully.")
        self.state = MigrationState.DIFF_PENDING

        logger.info("Retrieving diff from target project...")
        diff = self._step(self.target.get_diff, snapshot, force)
        logger.info("Diff retrieved successfully.")
        self.state = MigrationState.APPLY_PENDING

        logger.info("Applying diff to target project...")
        self._step(self.target.apply_diff, diff)
        self.state = MigrationState.DONE
        logger.info("Diff applied successfully. Migration complete.")

    def _step(self, func, *args):
        step = self.state
        try:
            return func(*args)
        except DirectusMigrateError as e:
            self.state = MigrationState.FAILED
            raise MigrationError(step, _FAILURE_CONTEXT[step], e) from e


def migrate(
    base_url: str,
    base_token: str,
    target_url: str,
    target_token: str,
    force: bool = False,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> None:
    """
    Migrate the schema of base onto target.
    Each instance gets its own HTTP client; transport, when given, is used by both.
    Raises MigrationError on failure.
    """
    base_conn = Connection(url=base_url, token=base_token)
    target_conn = Connection(url=target_url, token=target_token)
    logger.debug("Migrating %s -> %s (force=%s)", base_conn.mask(), target_conn.mask(), force)

    base_http = target_http = None
    if transport is not None:
        base_http = httpx.Client(transport=transport, timeout=DirectusClient.DEFAULT_TIMEOUT)
        target_http = httpx.Client(transport=transport, timeout=DirectusClient.DEFAULT_TIMEOUT)
    try:
        with DirectusClient.from_connection(base_conn, base_http) as base, \
                DirectusClient.from_connection(target_conn, target_http) as target:
            SchemaMigrator(base, target).run(force=force)
    finally:
        for http in (base_http, target_http):
            if http is not None:
                http.close()

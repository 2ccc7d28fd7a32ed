"""Data models for connections and schema documents."""

from directus_migrate.models.connection import Connection
from directus_migrate.models.envelope import Diff, Envelope, Snapshot

__all__ = ["Connection", "Diff", "Envelope", "Snapshot"]

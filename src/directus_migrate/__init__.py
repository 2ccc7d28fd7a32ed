"""Migrate a Directus schema from one instance to another."""

from directus_migrate.client import DirectusClient
from directus_migrate.errors import (
    ConfigError,
    DirectusMigrateError,
    MalformedEnvelopeError,
    MigrationError,
    RemoteRejectionError,
    SerializationError,
    TransportError,
)
from directus_migrate.migration import MigrationState, SchemaMigrator, migrate
from directus_migrate.models import Connection

__all__ = [
    "ConfigError",
    "Connection",
    "DirectusClient",
    "DirectusMigrateError",
    "MalformedEnvelopeError",
    "MigrationError",
    "MigrationState",
    "RemoteRejectionError",
    "SchemaMigrator",
    "SerializationError",
    "TransportError",
    "migrate",
]

"""HTTP client for Directus schema endpoints."""

from directus_migrate.client.instance import DirectusClient

__all__ = ["DirectusClient"]

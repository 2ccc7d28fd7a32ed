"""Response envelope and the opaque schema documents it carries."""

from typing import Any

from pydantic import BaseModel

# Schema documents are forwarded untouched; their keys are never validated locally.
Snapshot = dict[str, Any]
Diff = dict[str, Any]


class Envelope(BaseModel):
    """The {"data": ...} wrapper Directus puts around every payload."""

    data: dict[str, Any]

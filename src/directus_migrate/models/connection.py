"""Connection parameters for one Directus instance."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Connection(BaseModel):
    """Base URL and static access token of a Directus instance. Immutable."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Base address, e.g. https://cms.example.com")
    token: str = Field(..., repr=False, description="Static access token")

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    def mask(self) -> dict[str, str]:
        """Return a loggable dict with the token hidden."""
        return {"url": self.url, "token": "****" if self.token else ""}

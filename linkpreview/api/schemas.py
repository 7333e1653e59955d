"""Response Pydantic models."""

from pydantic import BaseModel


class Metadata(BaseModel):
    """Preview record for one page.

    ``error`` is set only when the upstream page could not be read; the
    content fields are left unset in that case. Unset fields are dropped
    from the JSON body.
    """

    title: str | None = None
    description: str | None = None
    url: str | None = None
    image: str | None = None
    charset: str | None = None
    error: str | None = None

    def to_json_dict(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class HealthStatus(BaseModel):
    status: str = "ok"

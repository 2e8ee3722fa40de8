from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat

from .constants import DEFAULT_HTTP_TIMEOUT


class ReaderConfig(BaseModel):
    """Options for the byte sources a stream opens."""

    model_config = ConfigDict(frozen=True)

    http_timeout: PositiveFloat = DEFAULT_HTTP_TIMEOUT
    http_headers: dict[str, str] = Field(default_factory=dict)
    # passed through to fsspec for s3:// and s3x:// sources
    storage_options: dict[str, Any] = Field(default_factory=dict)
    endpoint_scheme: Literal['http', 'https'] = 'https'

"""Canonical Pydantic models shared across all plantstore modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`EndpointsConfig`, :class:`OutputConfig`,
    :class:`GlobalConfig`, and :class:`Profile`.

**Payload models** -- request bodies sent to the storefront server:
    :class:`Credentials` and :class:`PlantDraft`.

Plant records returned by the server are deliberately *not* modelled; they
are passed through to callers as decoded JSON.
"""

from __future__ import annotations

import enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_BASE_URL = "http://localhost:3001"


# --- Configuration ---


class StorageBackend(str, enum.Enum):
    """Where a profile keeps its access credential between invocations."""

    FILE = "file"
    MEMORY = "memory"
    NONE = "none"


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every call in a profile."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class EndpointsConfig(BaseModel):
    """Paths of the remote endpoints, relative to the profile's ``base_url``.

    The defaults match the storefront server. Deployments that mount the
    API under a prefix (e.g. ``api/``) can either put the prefix on
    ``base_url`` or override individual paths here.
    """

    login: str = "auth/login"
    signup: str = "auth/register"
    refresh: str = "auth/refreshToken"
    plants: str = "plants"


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/plantstore/config.json``.

    Fields here have the lowest precedence and can be overridden by project
    config, environment variables, or CLI flags. See
    :func:`~plantstore.config.resolve_config` for the full precedence chain.
    """

    default_profile: Optional[str] = None
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """Per-server profile stored as JSON under the ``profiles/`` config directory.

    A profile names one storefront server and bundles the endpoint layout,
    request settings and credential storage used to talk to it. Unknown keys
    are preserved in ``model_extra``.

    See Also:
        :func:`~plantstore.config.load_profile`: Deserialise a profile by name.
        :func:`~plantstore.config.save_profile`: Persist a profile to disk.
    """

    model_config = ConfigDict(extra="allow")

    name: str = "default"
    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Origin every relative path resolves against"
    )
    storage: StorageBackend = Field(
        default=StorageBackend.FILE, description="Credential storage: file, memory, none"
    )
    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Payloads ---


class Credentials(BaseModel):
    """Body of the login and registration requests."""

    email: str
    password: str


class PlantDraft(BaseModel):
    """Body of a create-plant request.

    ``watering_frequency`` is sent under its wire name ``wateringFrequency``;
    use ``model_dump(by_alias=True)`` when serialising.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    watering_frequency: Union[int, float] = Field(alias="wateringFrequency")

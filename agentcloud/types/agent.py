"""Build-agent facing records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

__all__ = [
    "AgentDescription",
    "AgentUserData",
]


@dataclass(frozen=True, slots=True)
class AgentDescription:
    """A build agent as it reports itself to the server."""

    name: str
    configuration_parameters: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True, slots=True)
class AgentUserData:
    """Bootstrap data for the agent that will run on a new instance."""

    server_address: str
    agent_name: str = ""
    auth_token: str = field(default="", repr=False)
    custom_parameters: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

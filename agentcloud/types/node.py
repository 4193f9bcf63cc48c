"""Node handles and node templates exchanged with compute services."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

__all__ = [
    "NodeMetadata",
    "NodeTemplate",
]


@dataclass(frozen=True, slots=True)
class NodeMetadata:
    """Opaque reference to a provisioned compute node.

    Only ``id`` is used to address the node; the rest is informative.
    """

    id: str
    name: str
    state: str = "unknown"
    public_ips: tuple[str, ...] = ()
    private_ips: tuple[str, ...] = ()

    @property
    def address(self) -> str | None:
        """First public IP, falling back to the first private IP."""
        if self.public_ips:
            return self.public_ips[0]
        if self.private_ips:
            return self.private_ips[0]
        return None


@dataclass(frozen=True, slots=True)
class NodeTemplate:
    """What to boot: image, flavor and placement of new nodes.

    Image, flavor, network and security group values may be names or ids;
    the compute service resolves them.
    """

    image: str
    flavor: str
    networks: tuple[str, ...] = ()
    security_groups: tuple[str, ...] = ()
    key_pair: str | None = None
    availability_zone: str | None = None
    user_data: str | None = None
    metadata: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

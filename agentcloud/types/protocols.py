"""Protocol definitions for the collaborators of a cloud instance."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from agentcloud.instance.instance import CloudInstance
    from agentcloud.types.node import NodeMetadata, NodeTemplate

__all__ = [
    "ComputeService",
    "CloudImage",
    "InstanceVariant",
]


@runtime_checkable
class ComputeService(Protocol):
    """Creates, reboots and destroys nodes on a cloud.

    Calls are blocking and may take minutes; callers run them off the
    thread that serves status reads.
    """

    def create_nodes_in_group(
        self,
        group: str,
        count: int,
        template: NodeTemplate,
    ) -> Sequence[NodeMetadata]:
        """Create ``count`` nodes tagged with ``group`` and wait until they run."""
        ...

    def reboot_node(self, node_id: str) -> None: ...

    def destroy_node(self, node_id: str) -> None: ...


@runtime_checkable
class CloudImage(Protocol):
    """Owning image of an instance: identity, template and compute service.

    Shared by every instance of the image and never mutated by them, except
    through ``forget_instance`` once an instance has stopped.
    """

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def template(self) -> NodeTemplate: ...

    @property
    def compute_service(self) -> ComputeService: ...

    def forget_instance(self, instance_id: str) -> None: ...


@runtime_checkable
class InstanceVariant(Protocol):
    """Deployment-flavor behavior of an instance.

    Selected per image instead of subclassing the instance.
    """

    @property
    def is_restartable(self) -> bool: ...

    def cleanup_stopped_instance(self, instance: CloudInstance) -> None:
        """Called exactly once after a successful terminate."""
        ...

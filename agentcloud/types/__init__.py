"""Type definitions for agentcloud."""

from agentcloud.types.agent import (
    AgentDescription,
    AgentUserData,
)
from agentcloud.types.node import (
    NodeMetadata,
    NodeTemplate,
)
from agentcloud.types.protocols import (
    CloudImage,
    ComputeService,
    InstanceVariant,
)
from agentcloud.types.status import (
    CloudErrorInfo,
    InstanceStatus,
)

__all__ = [
    "AgentDescription",
    "AgentUserData",
    "CloudErrorInfo",
    "CloudImage",
    "ComputeService",
    "InstanceStatus",
    "InstanceVariant",
    "NodeMetadata",
    "NodeTemplate",
]

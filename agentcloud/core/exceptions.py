"""Exception hierarchy for agentcloud.

All agentcloud-specific exceptions inherit from AgentCloudError, enabling
callers to catch every library error with a single except clause.
"""

from __future__ import annotations


class AgentCloudError(Exception):
    """Base exception for all agentcloud errors."""


class ConfigurationError(AgentCloudError):
    """Raised for invalid configuration or missing required settings."""


class InstanceStateError(AgentCloudError):
    """Raised when a lifecycle operation is invoked from a state that forbids it."""

    def __init__(self, instance_id: str, operation: str, status: str) -> None:
        self.instance_id = instance_id
        self.operation = operation
        self.status = status
        super().__init__(f"Cannot {operation} instance {instance_id} in state {status}")


class ProvisioningError(AgentCloudError):
    """Raised when node creation fails."""


class NodeCountError(ProvisioningError):
    """Raised when a single-node create returns anything but one node."""

    def __init__(self, group: str, expected: int, actual: int) -> None:
        self.group = group
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected {expected} node(s) in group {group!r}, compute service returned {actual}"
        )


class ComputeServiceError(AgentCloudError):
    """Raised when the compute service rejects a node operation."""


class NodeNotFoundError(ComputeServiceError):
    """Raised when a node handle no longer resolves to a node."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node {node_id} not found")

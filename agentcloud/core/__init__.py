from agentcloud.core.exceptions import (
    AgentCloudError,
    ComputeServiceError,
    ConfigurationError,
    InstanceStateError,
    NodeCountError,
    NodeNotFoundError,
    ProvisioningError,
)

__all__ = [
    "AgentCloudError",
    "ComputeServiceError",
    "ConfigurationError",
    "InstanceStateError",
    "NodeCountError",
    "NodeNotFoundError",
    "ProvisioningError",
]

"""agentcloud - lifecycle of cloud instances backing a build-agent fleet.

Example:
    from agentcloud import AgentUserData, InstanceStatus, create_task_runner, resolve_image
    from agentcloud.config import create_compute_service, load_config

    image = resolve_image(
        "linux-medium",
        compute_service=create_compute_service(load_config()),
        executor=create_task_runner(),
    )
    instance = image.start_new_instance(AgentUserData(server_address="https://ci"))
    instance.wait_for_status(InstanceStatus.RUNNING, InstanceStatus.ERROR, timeout=600)
"""

from agentcloud.config import Settings, load_config, resolve_image
from agentcloud.core.exceptions import (
    AgentCloudError,
    ComputeServiceError,
    ConfigurationError,
    InstanceStateError,
    NodeCountError,
    NodeNotFoundError,
    ProvisioningError,
)
from agentcloud.image import OpenstackImage
from agentcloud.instance import (
    CloudInstance,
    DisposableVariant,
    RetainingVariant,
)
from agentcloud.observability.logging import LogConfig, setup_logging, teardown_logging
from agentcloud.types import (
    AgentDescription,
    AgentUserData,
    CloudErrorInfo,
    CloudImage,
    ComputeService,
    InstanceStatus,
    InstanceVariant,
    NodeMetadata,
    NodeTemplate,
)
from agentcloud.utils.conc import create_task_runner

__version__ = "0.1.0"

__all__ = [
    "AgentCloudError",
    "AgentDescription",
    "AgentUserData",
    "CloudErrorInfo",
    "CloudImage",
    "CloudInstance",
    "ComputeService",
    "ComputeServiceError",
    "ConfigurationError",
    "DisposableVariant",
    "InstanceStateError",
    "InstanceStatus",
    "InstanceVariant",
    "LogConfig",
    "NodeCountError",
    "NodeMetadata",
    "NodeNotFoundError",
    "NodeTemplate",
    "OpenstackImage",
    "ProvisioningError",
    "RetainingVariant",
    "Settings",
    "create_task_runner",
    "load_config",
    "resolve_image",
    "setup_logging",
    "teardown_logging",
]

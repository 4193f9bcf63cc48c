"""OpenStack compute backend built on apache-libcloud."""

from agentcloud.providers.openstack.client import get_driver
from agentcloud.providers.openstack.compute import LibcloudComputeService
from agentcloud.providers.openstack.config import OpenstackCredentials

__all__ = [
    "LibcloudComputeService",
    "OpenstackCredentials",
    "get_driver",
]

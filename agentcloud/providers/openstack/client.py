"""OpenStack API client wrapper using apache-libcloud."""

from __future__ import annotations

from typing import TYPE_CHECKING

from libcloud.compute.providers import get_driver as _libcloud_driver
from libcloud.compute.types import Provider

if TYPE_CHECKING:
    from libcloud.compute.drivers.openstack import OpenStackNodeDriver

    from agentcloud.providers.openstack.config import OpenstackCredentials


def get_driver(credentials: OpenstackCredentials) -> OpenStackNodeDriver:
    """Create an authenticated libcloud OpenStack driver.

    Args:
        credentials: Keystone endpoint and account.

    Returns:
        Driver for the compute service of ``credentials.region``.
    """
    cls = _libcloud_driver(Provider.OPENSTACK)
    kwargs: dict[str, str] = {
        "ex_force_auth_url": credentials.endpoint,
        "ex_force_auth_version": credentials.auth_version,
        "ex_tenant_name": credentials.project,
        "ex_domain_name": credentials.domain,
    }
    if credentials.region:
        kwargs["ex_force_service_region"] = credentials.region
    return cls(credentials.username, credentials.password, **kwargs)

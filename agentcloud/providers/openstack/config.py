"""OpenStack connection configuration."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class OpenstackCredentials:
    """Keystone endpoint and account used by the compute service.

    Attributes:
        endpoint: Keystone auth URL (e.g. "https://keystone:5000").
        username: OpenStack user name.
        password: OpenStack password.
        project: Project (tenant) name.
        domain: User/project domain name.
        region: Compute service region.
        auth_version: libcloud auth version string.
    """

    endpoint: str
    username: str
    password: str = field(repr=False)
    project: str
    domain: str = "Default"
    region: str | None = None
    auth_version: str = "3.x_password"

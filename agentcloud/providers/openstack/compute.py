"""ComputeService over a libcloud OpenStack driver.

Node creation returns only once every new node is RUNNING. Nova offers no
push notification, so readiness is polled with a bounded deadline.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from libcloud.compute.base import Node
from libcloud.compute.types import NodeState
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_delay,
    wait_fixed,
)

from agentcloud.core.exceptions import ComputeServiceError, NodeNotFoundError, ProvisioningError
from agentcloud.observability.logger import logger
from agentcloud.types.node import NodeMetadata, NodeTemplate

log = logger.bind(component="openstack")


class _NodePendingError(Exception):
    """Node not yet running - retry."""


def to_metadata(node: Node) -> NodeMetadata:
    return NodeMetadata(
        id=str(node.id),
        name=node.name,
        state=str(node.state),
        public_ips=tuple(node.public_ips or ()),
        private_ips=tuple(node.private_ips or ()),
    )


def node_name(group: str) -> str:
    """Unique node name inside ``group``."""
    prefix = group.strip().lower().replace(" ", "-") or "agent"
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _match(items: Sequence[Any], wanted: str, kind: str) -> Any:
    for item in items:
        if wanted in (str(item.id), item.name):
            return item
    raise ProvisioningError(f"Unknown {kind} {wanted!r}")


class LibcloudComputeService:
    """Node operations against an OpenStack cloud.

    Args:
        driver: Authenticated libcloud OpenStack driver.
        create_timeout: Seconds to wait for a new node to reach RUNNING.
        poll_interval: Seconds between node state polls.
    """

    def __init__(
        self,
        driver: Any,
        *,
        create_timeout: float = 600.0,
        poll_interval: float = 5.0,
    ) -> None:
        self._driver = driver
        self._create_timeout = create_timeout
        self._poll_interval = poll_interval

    def create_nodes_in_group(
        self,
        group: str,
        count: int,
        template: NodeTemplate,
    ) -> Sequence[NodeMetadata]:
        create_args = self._resolve(template)
        created: list[Node] = []
        try:
            for _ in range(count):
                name = node_name(group)
                log.info("Creating node {name} ({flavor})", name=name, flavor=template.flavor)
                created.append(self._driver.create_node(name=name, **create_args))
            return tuple(to_metadata(self._wait_for_running(node)) for node in created)
        except Exception:
            self._discard(created)
            raise

    def reboot_node(self, node_id: str) -> None:
        node = self._get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        if not self._driver.reboot_node(node):
            raise ComputeServiceError(f"Reboot of node {node_id} was rejected")

    def destroy_node(self, node_id: str) -> None:
        node = self._get_node(node_id)
        if node is None:
            log.warning("Node {node} already gone", node=node_id)
            return
        if not self._driver.destroy_node(node):
            raise ComputeServiceError(f"Destroy of node {node_id} was rejected")

    def _get_node(self, node_id: str) -> Node | None:
        return self._driver.ex_get_node_details(node_id)

    def _resolve(self, template: NodeTemplate) -> dict[str, Any]:
        args: dict[str, Any] = {
            "image": _match(self._driver.list_images(), template.image, "image"),
            "size": _match(self._driver.list_sizes(), template.flavor, "flavor"),
        }
        if template.networks:
            networks = self._driver.ex_list_networks()
            args["networks"] = [_match(networks, n, "network") for n in template.networks]
        if template.security_groups:
            groups = self._driver.ex_list_security_groups()
            args["ex_security_groups"] = [
                _match(groups, g, "security group") for g in template.security_groups
            ]
        if template.key_pair:
            args["ex_keyname"] = template.key_pair
        if template.availability_zone:
            args["ex_availability_zone"] = template.availability_zone
        if template.user_data:
            args["ex_userdata"] = template.user_data
        if template.metadata:
            args["ex_metadata"] = dict(template.metadata)
        return args

    def _wait_for_running(self, node: Node) -> Node:
        @retry(
            stop=stop_after_delay(self._create_timeout),
            wait=wait_fixed(self._poll_interval),
            retry=retry_if_exception_type(_NodePendingError),
        )
        def _check() -> Node:
            current = self._get_node(node.id)
            if current is None:
                raise _NodePendingError()
            if current.state == NodeState.ERROR:
                raise ProvisioningError(f"Node {node.name} entered ERROR state")
            if current.state != NodeState.RUNNING:
                raise _NodePendingError()
            return current

        try:
            return _check()
        except RetryError as e:
            raise ProvisioningError(
                f"Node {node.name} did not become active within {self._create_timeout:.0f}s"
            ) from e

    def _discard(self, nodes: list[Node]) -> None:
        for node in nodes:
            try:
                self._driver.destroy_node(node)
            except Exception:
                log.exception("Failed to clean up node {name}", name=node.name)

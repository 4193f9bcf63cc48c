"""CloudInstance: lifecycle of a single cloud node backing a build agent.

State machine::

    SCHEDULED_TO_START → STARTING → RUNNING ⇄ RESTARTING
    STARTING/RUNNING → STOPPING → STOPPED

Any failed external call records an error, after which ``status`` reads
ERROR for the rest of the instance's life.

``start`` returns immediately; node creation runs on the task runner.
``restart`` and ``terminate`` block on the compute service and must not be
overlapped on the same instance by the caller.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future, wait
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from agentcloud.core.exceptions import InstanceStateError
from agentcloud.instance.affinity import matches_agent
from agentcloud.instance.provisioning import StartAgentJob
from agentcloud.instance.state import ErrorSlot, StatusRegister
from agentcloud.observability.logger import logger
from agentcloud.parameters import NETWORK_IDENTITY_PREFIX
from agentcloud.types.status import CloudErrorInfo, InstanceStatus
from agentcloud.utils.conc import submit_in_context

if TYPE_CHECKING:
    from agentcloud.types.agent import AgentDescription, AgentUserData
    from agentcloud.types.node import NodeMetadata
    from agentcloud.types.protocols import CloudImage, InstanceVariant

__all__ = ["CloudInstance", "STATUS_WAITING_TIMEOUT"]

STATUS_WAITING_TIMEOUT = 30.0

_STOPPED_STATES = frozenset({InstanceStatus.STOPPING, InstanceStatus.STOPPED})


class CloudInstance:
    """A provisioned (or pending) node of an image.

    Args:
        image: Owning image. Shared, not owned.
        instance_id: Id unique within the image.
        executor: Task runner for the provisioning job.
        variant: Deployment-flavor behavior (restartability, cleanup).
        status_wait_timeout: Seconds ``restart`` waits for RUNNING.
    """

    def __init__(
        self,
        image: CloudImage,
        instance_id: str,
        executor: Executor,
        variant: InstanceVariant,
        *,
        status_wait_timeout: float = STATUS_WAITING_TIMEOUT,
    ) -> None:
        self._image = image
        self._instance_id = instance_id
        self._executor = executor
        self._variant = variant
        self._status_wait_timeout = status_wait_timeout
        self._started_at = datetime.now(UTC)
        self._register = StatusRegister(InstanceStatus.SCHEDULED_TO_START)
        self._error = ErrorSlot()
        self._node: NodeMetadata | None = None
        self._provisioning: Future[None] | None = None
        self._log = logger.bind(
            component="instance", image_id=image.id, instance_id=instance_id,
        )

    def __repr__(self) -> str:
        return f"CloudInstance(id={self._instance_id!r}, image={self._image.id!r}, status={self.status})"

    # -- accessors ---------------------------------------------------------

    @property
    def status(self) -> InstanceStatus:
        if self._error.get() is not None:
            return InstanceStatus.ERROR
        return self._register.get()

    @property
    def error_info(self) -> CloudErrorInfo | None:
        return self._error.get()

    @property
    def instance_id(self) -> str:
        return self._instance_id

    @property
    def image(self) -> CloudImage:
        return self._image

    @property
    def image_id(self) -> str:
        return self._image.id

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def node(self) -> NodeMetadata | None:
        return self._node

    @property
    def name(self) -> str:
        if (node := self._node) is not None:
            return node.name
        return f"Pending node of image: {self._image.name}"

    @property
    def network_identity(self) -> str:
        return f"{NETWORK_IDENTITY_PREFIX}.{self.image_id}.{self._instance_id}"

    @property
    def is_restartable(self) -> bool:
        return self._variant.is_restartable

    def contains_agent(self, agent: AgentDescription) -> bool:
        return matches_agent(
            agent.configuration_parameters,
            instance_id=self._instance_id,
            image_id=self.image_id,
        )

    def wait_for_status(self, *statuses: InstanceStatus, timeout: float) -> bool:
        """Block until the observable status is one of ``statuses``.

        Returns False on timeout.
        """
        return self._register.wait_for(lambda _: self.status in statuses, timeout)

    # -- lifecycle ---------------------------------------------------------

    def start(self, user_data: AgentUserData) -> None:
        """Request a node and return without waiting for it.

        Raises:
            InstanceStateError: If the instance was already started.
        """
        if not self._register.compare_and_set(
            InstanceStatus.SCHEDULED_TO_START, InstanceStatus.STARTING,
        ):
            raise InstanceStateError(self._instance_id, "start", self.status)

        self._log.info("Scheduling node creation")
        job = StartAgentJob(instance=self, user_data=user_data)
        try:
            self._provisioning = submit_in_context(self._executor, job.run)
        except Exception as e:
            self._process_error(e)

    def restart(self) -> None:
        """Reboot the node, waiting first for provisioning to reach RUNNING.

        On timeout the reboot proceeds anyway.
        """
        ready = self._register.wait_for(
            lambda s: s is InstanceStatus.RUNNING or self._error.get() is not None,
            self._status_wait_timeout,
        )
        if not ready:
            self._log.warning(
                "Instance not running after {timeout:.1f}s, restarting anyway",
                timeout=self._status_wait_timeout,
            )

        self._register.set(InstanceStatus.RESTARTING)
        node = self._node
        if node is None:
            self._log.warning("Restart requested before a node exists, nothing to reboot")
            return

        try:
            self._image.compute_service.reboot_node(node.id)
        except Exception as e:
            self._process_error(e)
            return
        self._register.set(InstanceStatus.RUNNING)
        self._log.info("Node {node} rebooted", node=node.id)

    def terminate(self) -> None:
        """Destroy the node (if any), mark STOPPED and run variant cleanup.

        Waits for an in-flight node creation to finish first, so that a node
        created while stopping is destroyed too.
        """
        self._register.set(InstanceStatus.STOPPING)
        if (pending := self._provisioning) is not None and not pending.done():
            self._log.info("Waiting for node creation before terminating")
            wait([pending])
        node = self._node
        try:
            if node is not None:
                self._image.compute_service.destroy_node(node.id)
                self._log.info("Node {node} destroyed", node=node.id)
            else:
                self._log.info("No node to destroy")
        except Exception as e:
            self._process_error(e)
            return

        self._register.set(InstanceStatus.STOPPED)
        self._variant.cleanup_stopped_instance(self)

    # -- provisioning callbacks ----------------------------------------------

    def _attach_node(self, node: NodeMetadata) -> None:
        self._node = node
        if not self._register.set_unless(InstanceStatus.RUNNING, _STOPPED_STATES):
            self._log.info("Node {node} created while stopping", node=node.id)
            return
        self._log.info("Node {node} is running at {address}", node=node.id, address=node.address)

    def _process_error(self, error: Exception) -> None:
        info = CloudErrorInfo.from_exception(error)
        self._log.exception(info.message)
        self._error.record(info)
        self._register.notify()

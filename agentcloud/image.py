"""OpenstackImage - an image definition plus the instances started from it."""

from __future__ import annotations

import threading
import uuid
from concurrent.futures import Executor
from dataclasses import dataclass, field

from agentcloud.instance.instance import STATUS_WAITING_TIMEOUT, CloudInstance
from agentcloud.instance.variants import DisposableVariant
from agentcloud.observability.logger import logger
from agentcloud.types.agent import AgentDescription, AgentUserData
from agentcloud.types.node import NodeTemplate
from agentcloud.types.protocols import ComputeService, InstanceVariant
from agentcloud.types.status import InstanceStatus
from agentcloud.utils.conc import for_each_async


@dataclass
class OpenstackImage:
    """Image that agents are started from.

    Owns the registry of its instances. Instances share the image's compute
    service and task runner.

    Attributes:
        id: Image id, reported back by agents for affinity matching.
        name: Group name nodes are created in.
        template: What each node boots.
        compute_service: Cloud backend for node operations.
        executor: Task runner for provisioning jobs.
        variant: Deployment-flavor behavior for new instances.
        status_wait_timeout: Seconds ``restart`` waits for RUNNING.
    """

    id: str
    name: str
    template: NodeTemplate
    compute_service: ComputeService
    executor: Executor = field(repr=False)
    variant: InstanceVariant = field(default_factory=DisposableVariant)
    status_wait_timeout: float = STATUS_WAITING_TIMEOUT

    _instances: dict[str, CloudInstance] = field(
        default_factory=dict, init=False, repr=False, compare=False,
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False,
    )

    @property
    def instances(self) -> tuple[CloudInstance, ...]:
        with self._lock:
            return tuple(self._instances.values())

    def get_instance(self, instance_id: str) -> CloudInstance | None:
        with self._lock:
            return self._instances.get(instance_id)

    def find_instance(self, agent: AgentDescription) -> CloudInstance | None:
        """Instance the reporting agent runs on, if it belongs to this image."""
        return next((i for i in self.instances if i.contains_agent(agent)), None)

    def start_new_instance(self, user_data: AgentUserData) -> CloudInstance:
        """Register a fresh instance and start provisioning its node."""
        instance = CloudInstance(
            self,
            self._new_instance_id(),
            self.executor,
            self.variant,
            status_wait_timeout=self.status_wait_timeout,
        )
        with self._lock:
            self._instances[instance.instance_id] = instance
        logger.bind(component="image", image_id=self.id).info(
            "Starting instance {iid}", iid=instance.instance_id,
        )
        instance.start(user_data)
        return instance

    def forget_instance(self, instance_id: str) -> None:
        with self._lock:
            self._instances.pop(instance_id, None)

    def terminate_all(self) -> None:
        """Terminate every instance that has not stopped yet, concurrently."""
        live = [i for i in self.instances if i.status is not InstanceStatus.STOPPED]
        for_each_async(CloudInstance.terminate, live)

    def _new_instance_id(self) -> str:
        with self._lock:
            while (iid := uuid.uuid4().hex[:12]) in self._instances:
                pass
            return iid

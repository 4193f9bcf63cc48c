from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import pytest

from agentcloud.instance.instance import CloudInstance
from agentcloud.types.agent import AgentUserData
from agentcloud.types.node import NodeMetadata, NodeTemplate


class FakeComputeService:
    """In-process compute service.

    ``gate`` blocks create calls until set. ``create_error`` / ``reboot_error``
    / ``destroy_error`` make the matching call raise. ``nodes_per_create``
    overrides how many nodes a create returns.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []
        self.gate = threading.Event()
        self.gate.set()
        self.reboot_gate = threading.Event()
        self.reboot_gate.set()
        self.create_error: Exception | None = None
        self.reboot_error: Exception | None = None
        self.destroy_error: Exception | None = None
        self.nodes_per_create: int | None = None
        self.create_finished = threading.Event()
        self._counter = 0
        self._lock = threading.Lock()

    def create_nodes_in_group(
        self, group: str, count: int, template: NodeTemplate,
    ) -> Sequence[NodeMetadata]:
        self.calls.append(("create", (group, count, template)))
        try:
            self.gate.wait(10)
            if self.create_error is not None:
                raise self.create_error
            n = self.nodes_per_create if self.nodes_per_create is not None else count
            return tuple(self._node(group) for _ in range(n))
        finally:
            self.create_finished.set()

    def reboot_node(self, node_id: str) -> None:
        self.calls.append(("reboot", node_id))
        self.reboot_gate.wait(10)
        if self.reboot_error is not None:
            raise self.reboot_error

    def destroy_node(self, node_id: str) -> None:
        self.calls.append(("destroy", node_id))
        if self.destroy_error is not None:
            raise self.destroy_error

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def _node(self, group: str) -> NodeMetadata:
        with self._lock:
            self._counter += 1
            n = self._counter
        return NodeMetadata(
            id=f"node-{n}",
            name=f"{group}-{n:08x}",
            state="running",
            private_ips=(f"10.0.0.{n}",),
        )


@dataclass
class FakeImage:
    id: str
    name: str
    compute_service: FakeComputeService
    template: NodeTemplate = field(
        default_factory=lambda: NodeTemplate(image="ubuntu-22.04", flavor="m1.small"),
    )
    forgotten: list[str] = field(default_factory=list)

    def forget_instance(self, instance_id: str) -> None:
        self.forgotten.append(instance_id)


class RecordingVariant:
    def __init__(self, restartable: bool = True) -> None:
        self.restartable = restartable
        self.cleaned: list[str] = []

    @property
    def is_restartable(self) -> bool:
        return self.restartable

    def cleanup_stopped_instance(self, instance: CloudInstance) -> None:
        self.cleaned.append(instance.instance_id)


@pytest.fixture
def compute() -> FakeComputeService:
    return FakeComputeService()


@pytest.fixture
def image(compute: FakeComputeService) -> FakeImage:
    return FakeImage(id="img-linux", name="linux-agents", compute_service=compute)


@pytest.fixture
def variant() -> RecordingVariant:
    return RecordingVariant()


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-provisioning")
    yield pool
    pool.shutdown(wait=True, cancel_futures=True)


@pytest.fixture
def user_data() -> AgentUserData:
    return AgentUserData(server_address="https://ci.example.com", agent_name="agent-1")


@pytest.fixture
def make_instance(image: FakeImage, executor: ThreadPoolExecutor, variant: RecordingVariant):
    def _make(instance_id: str = "i-1", status_wait_timeout: float = 5.0) -> CloudInstance:
        return CloudInstance(
            image,
            instance_id,
            executor,
            variant,
            status_wait_timeout=status_wait_timeout,
        )

    return _make

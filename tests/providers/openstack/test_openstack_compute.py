from __future__ import annotations

import re
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from libcloud.compute.types import NodeState

from agentcloud.core.exceptions import ComputeServiceError, NodeNotFoundError, ProvisioningError
from agentcloud.providers.openstack.compute import LibcloudComputeService, node_name, to_metadata
from agentcloud.types.node import NodeTemplate

pytestmark = [pytest.mark.unit, pytest.mark.timeout(30)]


def _node(node_id: str = "n-1", state=NodeState.RUNNING, name: str = "agents-0001"):
    return SimpleNamespace(
        id=node_id,
        name=name,
        state=state,
        public_ips=["203.0.113.5"],
        private_ips=["10.0.0.5"],
    )


def _named(item_id: str, name: str):
    return SimpleNamespace(id=item_id, name=name)


@pytest.fixture
def driver() -> MagicMock:
    d = MagicMock()
    d.list_images.return_value = [_named("img-1", "ubuntu-22.04"), _named("img-2", "windows")]
    d.list_sizes.return_value = [_named("1", "m1.small"), _named("2", "m1.medium")]
    d.ex_list_networks.return_value = [_named("net-1", "private")]
    d.ex_list_security_groups.return_value = [_named("sg-1", "default")]
    d.create_node.side_effect = lambda **kw: _node(state=NodeState.PENDING, name=kw["name"])
    d.ex_get_node_details.return_value = _node()
    d.reboot_node.return_value = True
    d.destroy_node.return_value = True
    return d


@pytest.fixture
def service(driver) -> LibcloudComputeService:
    return LibcloudComputeService(driver, create_timeout=1.0, poll_interval=0.01)


TEMPLATE = NodeTemplate(image="ubuntu-22.04", flavor="m1.medium")


class TestCreateNodes:
    def test_resolves_template_and_returns_running_nodes(self, service, driver):
        template = NodeTemplate(
            image="ubuntu-22.04",
            flavor="2",
            networks=("private",),
            security_groups=("default",),
            key_pair="agents",
            availability_zone="nova",
            user_data="#cloud-config\n",
            metadata={"team": "ci"},
        )

        nodes = service.create_nodes_in_group("linux-agents", 1, template)

        assert len(nodes) == 1
        assert nodes[0].id == "n-1"
        assert nodes[0].address == "203.0.113.5"
        kwargs = driver.create_node.call_args.kwargs
        assert re.fullmatch(r"linux-agents-[0-9a-f]{8}", kwargs["name"])
        assert kwargs["image"].id == "img-1"
        assert kwargs["size"].name == "m1.medium"
        assert [n.id for n in kwargs["networks"]] == ["net-1"]
        assert [g.id for g in kwargs["ex_security_groups"]] == ["sg-1"]
        assert kwargs["ex_keyname"] == "agents"
        assert kwargs["ex_availability_zone"] == "nova"
        assert kwargs["ex_userdata"] == "#cloud-config\n"
        assert kwargs["ex_metadata"] == {"team": "ci"}

    def test_minimal_template_passes_only_image_and_size(self, service, driver):
        service.create_nodes_in_group("linux-agents", 1, TEMPLATE)
        assert set(driver.create_node.call_args.kwargs) == {"name", "image", "size"}
        driver.ex_list_networks.assert_not_called()

    def test_creates_count_nodes(self, service, driver):
        driver.ex_get_node_details.side_effect = [_node("a"), _node("b")]
        nodes = service.create_nodes_in_group("linux-agents", 2, TEMPLATE)
        assert [n.id for n in nodes] == ["a", "b"]
        assert driver.create_node.call_count == 2

    def test_polls_until_running(self, service, driver):
        driver.ex_get_node_details.side_effect = [
            None,
            _node(state=NodeState.PENDING),
            _node(state=NodeState.RUNNING),
        ]
        nodes = service.create_nodes_in_group("linux-agents", 1, TEMPLATE)
        assert nodes[0].state == str(NodeState.RUNNING)
        assert driver.ex_get_node_details.call_count == 3

    def test_error_state_fails_and_discards_node(self, service, driver):
        driver.ex_get_node_details.return_value = _node(state=NodeState.ERROR)
        with pytest.raises(ProvisioningError, match="ERROR state"):
            service.create_nodes_in_group("linux-agents", 1, TEMPLATE)
        driver.destroy_node.assert_called_once()

    def test_timeout_fails_and_discards_node(self, driver):
        driver.ex_get_node_details.return_value = _node(state=NodeState.PENDING)
        service = LibcloudComputeService(driver, create_timeout=0.05, poll_interval=0.01)
        with pytest.raises(ProvisioningError, match="did not become active"):
            service.create_nodes_in_group("linux-agents", 1, TEMPLATE)
        driver.destroy_node.assert_called_once()

    def test_unknown_flavor(self, service, driver):
        with pytest.raises(ProvisioningError, match="flavor"):
            service.create_nodes_in_group(
                "linux-agents", 1, NodeTemplate(image="ubuntu-22.04", flavor="m9.huge"),
            )
        driver.create_node.assert_not_called()

    def test_create_rejection_propagates(self, service, driver):
        driver.create_node.side_effect = RuntimeError("Quota exceeded for instances")
        with pytest.raises(RuntimeError, match="Quota"):
            service.create_nodes_in_group("linux-agents", 1, TEMPLATE)

    def test_cleanup_failure_does_not_mask_original_error(self, service, driver):
        driver.ex_get_node_details.return_value = _node(state=NodeState.ERROR)
        driver.destroy_node.side_effect = RuntimeError("nova down")
        with pytest.raises(ProvisioningError):
            service.create_nodes_in_group("linux-agents", 1, TEMPLATE)


class TestRebootNode:
    def test_reboots(self, service, driver):
        service.reboot_node("n-1")
        driver.ex_get_node_details.assert_called_with("n-1")
        driver.reboot_node.assert_called_once_with(driver.ex_get_node_details.return_value)

    def test_missing_node(self, service, driver):
        driver.ex_get_node_details.return_value = None
        with pytest.raises(NodeNotFoundError):
            service.reboot_node("n-1")

    def test_rejected(self, service, driver):
        driver.reboot_node.return_value = False
        with pytest.raises(ComputeServiceError, match="Reboot"):
            service.reboot_node("n-1")


class TestDestroyNode:
    def test_destroys(self, service, driver):
        service.destroy_node("n-1")
        driver.destroy_node.assert_called_once_with(driver.ex_get_node_details.return_value)

    def test_missing_node_is_already_destroyed(self, service, driver):
        driver.ex_get_node_details.return_value = None
        service.destroy_node("n-1")
        driver.destroy_node.assert_not_called()

    def test_rejected(self, service, driver):
        driver.destroy_node.return_value = False
        with pytest.raises(ComputeServiceError, match="Destroy"):
            service.destroy_node("n-1")


class TestHelpers:
    def test_node_name(self):
        assert re.fullmatch(r"linux-agents-[0-9a-f]{8}", node_name("Linux Agents"))
        assert node_name("g") != node_name("g")

    def test_to_metadata(self):
        meta = to_metadata(_node())
        assert meta.id == "n-1"
        assert meta.public_ips == ("203.0.113.5",)
        assert meta.private_ips == ("10.0.0.5",)

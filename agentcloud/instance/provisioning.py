"""Background provisioning of an instance's node."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from agentcloud.core.exceptions import NodeCountError
from agentcloud.observability.logger import logger

if TYPE_CHECKING:
    from agentcloud.instance.instance import CloudInstance
    from agentcloud.types.agent import AgentUserData


@dataclass(frozen=True, slots=True)
class StartAgentJob:
    """Creates the single node backing ``instance``.

    Runs on the task runner. Never raises: every failure is recorded on the
    instance. ``user_data`` is carried for the agent bootstrap but is not
    part of the create request.
    """

    instance: CloudInstance
    user_data: AgentUserData

    def run(self) -> None:
        instance = self.instance
        image = instance.image
        log = logger.bind(component="provisioning", instance_id=instance.instance_id)
        log.debug(
            "Creating node in group {group} for agent {agent}",
            group=image.name,
            agent=self.user_data.agent_name or "<unnamed>",
        )
        try:
            nodes = image.compute_service.create_nodes_in_group(image.name, 1, image.template)
            if len(nodes) != 1:
                raise NodeCountError(image.name, 1, len(nodes))
            instance._attach_node(nodes[0])
        except Exception as e:
            instance._process_error(e)

"""Agent-affinity matching."""

from __future__ import annotations

from collections.abc import Mapping

from agentcloud.parameters import IMAGE_ID_PARAM_NAME, INSTANCE_ID_PARAM_NAME


def matches_agent(
    parameters: Mapping[str, str],
    *,
    instance_id: str,
    image_id: str,
) -> bool:
    """True iff the agent declares exactly this instance id and image id."""
    return (
        parameters.get(INSTANCE_ID_PARAM_NAME) == instance_id
        and parameters.get(IMAGE_ID_PARAM_NAME) == image_id
    )

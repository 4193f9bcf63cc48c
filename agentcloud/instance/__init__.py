from agentcloud.instance.affinity import matches_agent
from agentcloud.instance.instance import STATUS_WAITING_TIMEOUT, CloudInstance
from agentcloud.instance.provisioning import StartAgentJob
from agentcloud.instance.state import ErrorSlot, StatusRegister
from agentcloud.instance.variants import DisposableVariant, RetainingVariant, variant_for

__all__ = [
    "STATUS_WAITING_TIMEOUT",
    "CloudInstance",
    "DisposableVariant",
    "ErrorSlot",
    "RetainingVariant",
    "StartAgentJob",
    "StatusRegister",
    "matches_agent",
    "variant_for",
]

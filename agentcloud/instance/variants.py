"""Deployment-flavor strategies for instances.

A variant decides whether an instance may be restarted and what happens to
its record once it has stopped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from agentcloud.observability.logger import logger

if TYPE_CHECKING:
    from agentcloud.instance.instance import CloudInstance

__all__ = [
    "DisposableVariant",
    "RetainingVariant",
    "variant_for",
]


@dataclass(frozen=True, slots=True)
class DisposableVariant:
    """One-shot nodes: never restarted, dropped from the image once stopped."""

    @property
    def is_restartable(self) -> bool:
        return False

    def cleanup_stopped_instance(self, instance: CloudInstance) -> None:
        instance.image.forget_instance(instance.instance_id)


@dataclass(frozen=True, slots=True)
class RetainingVariant:
    """Restartable nodes whose stopped records stay listed on the image."""

    @property
    def is_restartable(self) -> bool:
        return True

    def cleanup_stopped_instance(self, instance: CloudInstance) -> None:
        logger.bind(component="variant", instance_id=instance.instance_id).debug(
            "Keeping stopped instance record"
        )


def variant_for(restartable: bool) -> DisposableVariant | RetainingVariant:
    return RetainingVariant() if restartable else DisposableVariant()

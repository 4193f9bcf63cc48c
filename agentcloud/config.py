"""TOML-based image and connection configuration.

Loads ~/.agentcloud/defaults.toml (global) and agentcloud.toml (project),
merges them, and resolves named images into OpenstackImage instances.

Example agentcloud.toml::

    [openstack]
    endpoint = "https://keystone.example.com:5000"
    username = "ci"
    password = "secret"
    project = "build-agents"

    [settings]
    status_wait_timeout = 30.0
    provisioning_workers = 4

    [images.linux-medium]
    image = "ubuntu-22.04"
    flavor = "m1.medium"
    networks = ["private"]
    restartable = true
"""

from __future__ import annotations

import tomllib
from concurrent.futures import Executor
from dataclasses import dataclass, fields
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeAlias

from agentcloud.core.exceptions import ConfigurationError
from agentcloud.types.node import NodeTemplate

if TYPE_CHECKING:
    from agentcloud.image import OpenstackImage
    from agentcloud.providers.openstack.config import OpenstackCredentials
    from agentcloud.types.protocols import ComputeService

RawConfig: TypeAlias = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".agentcloud" / "defaults.toml"
PROJECT_CONFIG_NAME = "agentcloud.toml"

_IMAGE_KEYS = frozenset({
    "name", "image", "flavor", "networks", "security_groups", "key_pair",
    "availability_zone", "user_data", "metadata", "restartable",
})


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime tuning shared by every image.

    Attributes:
        status_wait_timeout: Seconds ``restart`` waits for RUNNING.
        provisioning_workers: Concurrent node creations.
        node_create_timeout: Seconds a new node may take to reach RUNNING.
        poll_interval: Seconds between node state polls.
    """

    status_wait_timeout: float = 30.0
    provisioning_workers: int = 4
    node_create_timeout: float = 600.0
    poll_interval: float = 5.0


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("settings", {})
    merged.setdefault("images", {})
    return merged


def load_settings(config: RawConfig) -> Settings:
    raw = dict(config.get("settings", {}))
    known = {f.name for f in fields(Settings)}
    if unknown := sorted(set(raw) - known):
        raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")
    return Settings(**raw)


def load_credentials(config: RawConfig) -> OpenstackCredentials:
    from agentcloud.providers.openstack.config import OpenstackCredentials

    raw = config.get("openstack")
    if not raw:
        raise ConfigurationError("Missing [openstack] section")
    try:
        return OpenstackCredentials(**raw)
    except TypeError as e:
        raise ConfigurationError(f"Invalid [openstack] section: {e}") from e


def create_compute_service(config: RawConfig) -> ComputeService:
    """Connect to the cloud described by ``config``."""
    from agentcloud.providers.openstack import LibcloudComputeService, get_driver

    settings = load_settings(config)
    return LibcloudComputeService(
        get_driver(load_credentials(config)),
        create_timeout=settings.node_create_timeout,
        poll_interval=settings.poll_interval,
    )


def build_template(image_id: str, raw: RawConfig) -> NodeTemplate:
    if unknown := sorted(set(raw) - _IMAGE_KEYS):
        raise ConfigurationError(f"Image '{image_id}' has unknown keys: {', '.join(unknown)}")
    for required in ("image", "flavor"):
        if required not in raw:
            raise ConfigurationError(f"Image '{image_id}' missing '{required}' field")

    return NodeTemplate(
        image=raw["image"],
        flavor=raw["flavor"],
        networks=tuple(raw.get("networks", ())),
        security_groups=tuple(raw.get("security_groups", ())),
        key_pair=raw.get("key_pair"),
        availability_zone=raw.get("availability_zone"),
        user_data=raw.get("user_data"),
        metadata=MappingProxyType(dict(raw.get("metadata", {}))),
    )


def resolve_image(
    image_id: str,
    *,
    compute_service: ComputeService,
    executor: Executor,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> OpenstackImage:
    from agentcloud.image import OpenstackImage
    from agentcloud.instance.variants import variant_for

    config = load_config(project_dir=project_dir, global_path=global_path)
    settings = load_settings(config)

    images = config["images"]
    if image_id not in images:
        raise KeyError(f"Image '{image_id}' not found. Available: {', '.join(images) or 'none'}")

    raw = dict(images[image_id])
    restartable = bool(raw.pop("restartable", False))
    name = raw.pop("name", image_id)

    return OpenstackImage(
        id=image_id,
        name=name,
        template=build_template(image_id, raw),
        compute_service=compute_service,
        executor=executor,
        variant=variant_for(restartable),
        status_wait_timeout=settings.status_wait_timeout,
    )

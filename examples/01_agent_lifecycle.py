"""Agent Lifecycle - start, restart and terminate one build-agent instance.

Reads agentcloud.toml from the current directory:

    [openstack]
    endpoint = "https://keystone.example.com:5000"
    username = "ci"
    password = "secret"
    project = "build-agents"

    [images.linux-medium]
    image = "ubuntu-22.04"
    flavor = "m1.medium"
    networks = ["private"]
    restartable = true
"""

import agentcloud as ac
from agentcloud.config import create_compute_service, load_config, load_settings


def main() -> None:
    handler_ids = ac.setup_logging(ac.LogConfig(level="INFO", console=True))
    config = load_config()
    settings = load_settings(config)
    runner = ac.create_task_runner(settings.provisioning_workers)

    try:
        image = ac.resolve_image(
            "linux-medium",
            compute_service=create_compute_service(config),
            executor=runner,
        )
        instance = image.start_new_instance(
            ac.AgentUserData(server_address="https://ci.example.com", agent_name="linux-1"),
        )
        print(f"{instance.instance_id}: {instance.status}")

        instance.wait_for_status(
            ac.InstanceStatus.RUNNING,
            ac.InstanceStatus.ERROR,
            timeout=settings.node_create_timeout,
        )
        print(f"{instance.name}: {instance.status}")

        if instance.status is ac.InstanceStatus.ERROR:
            print(f"Provisioning failed: {instance.error_info.message}")
        elif instance.is_restartable:
            instance.restart()
            print(f"{instance.name}: {instance.status} after restart")

        instance.terminate()
        print(f"{instance.name}: {instance.status}")
    finally:
        runner.shutdown(wait=True)
        ac.teardown_logging(handler_ids)


if __name__ == "__main__":
    main()

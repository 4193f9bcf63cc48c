"""Names of the agent configuration parameters that tie an agent to its instance.

An agent booted on a provisioned node reports both values back to the
server so that the reporting agent can be matched to the instance that
owns the node.
"""

INSTANCE_ID_PARAM_NAME = "clouds.openstack.instanceId"
IMAGE_ID_PARAM_NAME = "clouds.openstack.imageId"
NETWORK_IDENTITY_PREFIX = "clouds.openstack"

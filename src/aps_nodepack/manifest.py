"""
APS Node Pack Manifest - Registration function for entry-points.
"""

from aps_nodepack import __version__
from aps_nodepack.credentials import (
    AutodeskPlatformServicesClientCredentialsOAuth2ApiCredential,
    AutodeskPlatformServicesOAuth2ApiCredential,
)
from aps_nodepack.nodes import ApsDataManagementNode
from aps_nodepack.registry.models import NodePackManifest


MANIFEST = NodePackManifest(
    name="aps",
    version=__version__,
    description="Autodesk Platform Services nodes and credentials",
    author="aps-nodepack",
    license="MIT",
    nodes=[
        "apsDataManagement",
    ],
    credentials=[
        "autodeskPlatformServicesOAuth2Api",
        "autodeskPlatformServicesClientCredentialsOAuth2Api",
    ],
    entry_point="aps_nodepack.nodes",
)


# Node classes by type
NODE_CLASSES = {
    "apsDataManagement": ApsDataManagementNode,
}

# Credential classes by name
CREDENTIAL_CLASSES = {
    "autodeskPlatformServicesOAuth2Api": AutodeskPlatformServicesOAuth2ApiCredential,
    "autodeskPlatformServicesClientCredentialsOAuth2Api": (
        AutodeskPlatformServicesClientCredentialsOAuth2ApiCredential
    ),
}


def register_nodes():
    """
    Entry point function for node pack discovery.

    Returns tuple of (manifest, node_classes, credential_classes).
    """
    return MANIFEST, NODE_CLASSES, CREDENTIAL_CLASSES


__all__ = [
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]

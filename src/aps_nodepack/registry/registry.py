"""
Node Registry - Central registry for node and credential discovery.

Supports two discovery methods:
1. Manual registration (nodes, credential types, whole packs)
2. Entry-points (for plugin node packs)
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Dict, Iterator, List, Optional, Type, TYPE_CHECKING

from .models import CredentialDefinition, NodeDefinition, NodePackManifest


if TYPE_CHECKING:
    from aps_nodepack.credentials.base import BaseCredential
    from aps_nodepack.node_sdk.basenode import BaseNode


logger = logging.getLogger(__name__)

# Entry point group for node packs
NODE_PACK_ENTRY_POINT = "aps_nodepack.nodepacks"


class NodeRegistry:
    """
    Central registry for discovering and instantiating nodes.

    Usage:
        registry = NodeRegistry()
        registry.discover_entry_points()

        node = registry.create_node("apsDataManagement")
        credential_class = registry.get_credential_class("autodeskPlatformServicesOAuth2Api")
    """

    def __init__(self):
        """Initialize empty registry."""
        self._nodes: Dict[str, NodeDefinition] = {}
        self._node_classes: Dict[str, Type["BaseNode"]] = {}
        self._credentials: Dict[str, CredentialDefinition] = {}
        self._credential_classes: Dict[str, Type["BaseCredential"]] = {}
        self._packs: Dict[str, NodePackManifest] = {}
        self._discovered = False

    def register_node(
        self,
        node_class: Type["BaseNode"],
        node_type: Optional[str] = None,
    ) -> NodeDefinition:
        """
        Register a node class.

        Args:
            node_class: BaseNode subclass
            node_type: Override node type (uses class.type if not provided)

        Returns:
            NodeDefinition for the registered node
        """
        definition = NodeDefinition.from_node_class(node_class)
        if node_type is not None:
            definition.node_type = node_type

        self._nodes[definition.node_type] = definition
        self._node_classes[definition.node_type] = node_class

        logger.debug("Registered node: %s", definition.node_type)
        return definition

    def register_credential(
        self,
        credential_class: Type["BaseCredential"],
    ) -> CredentialDefinition:
        """Register a credential type."""
        definition = CredentialDefinition.from_credential_class(credential_class)

        self._credentials[definition.name] = definition
        self._credential_classes[definition.name] = credential_class

        logger.debug("Registered credential type: %s", definition.name)
        return definition

    def register_pack(
        self,
        manifest: NodePackManifest,
        node_classes: Dict[str, Type["BaseNode"]],
        credential_classes: Optional[Dict[str, Type["BaseCredential"]]] = None,
    ) -> None:
        """
        Register a node pack with its nodes and credential types.

        Args:
            manifest: Pack manifest
            node_classes: Map of node_type -> node class
            credential_classes: Map of credential name -> credential class
        """
        self._packs[manifest.name] = manifest

        for node_type, node_class in node_classes.items():
            definition = self.register_node(node_class, node_type)
            definition.node_pack = manifest.name

        for credential_class in (credential_classes or {}).values():
            self.register_credential(credential_class)

        logger.info(
            "Registered pack '%s' with %d nodes and %d credential types",
            manifest.name, len(node_classes), len(credential_classes or {}),
        )

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Discover node packs via entry points.

        Entry points are defined in pyproject.toml:

            [project.entry-points."aps_nodepack.nodepacks"]
            mypack = "mypack:register_nodes"

        The entry point should be a function that returns
        (manifest, node_classes, credential_classes).

        Args:
            force: Re-discover even if already done

        Returns:
            Number of packs discovered
        """
        if self._discovered and not force:
            return len(self._packs)

        count = 0
        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            try:
                manifest, node_classes, credential_classes = ep.load()()
            except (ImportError, AttributeError, TypeError, ValueError) as e:
                logger.error("Failed to load node pack '%s': %s", ep.name, e)
                continue

            self.register_pack(manifest, node_classes, credential_classes)
            count += 1
            logger.info("Discovered node pack: %s", ep.name)

        self._discovered = True
        return count

    def get_node(self, node_type: str) -> Optional[NodeDefinition]:
        """Get node definition by type."""
        return self._nodes.get(node_type)

    def get_node_class(self, node_type: str) -> Optional[Type["BaseNode"]]:
        """Get node class by type."""
        return self._node_classes.get(node_type)

    def create_node(self, node_type: str) -> Optional["BaseNode"]:
        """
        Create a node instance.

        Returns:
            Node instance or None if not found
        """
        node_class = self.get_node_class(node_type)
        if node_class:
            return node_class()
        return None

    def get_credential(self, name: str) -> Optional[CredentialDefinition]:
        """Get credential definition by name."""
        return self._credentials.get(name)

    def get_credential_class(self, name: str) -> Type["BaseCredential"]:
        """Get credential class by name; raises ValueError if unknown."""
        if name not in self._credential_classes:
            raise ValueError(f"Credential type '{name}' not found")
        return self._credential_classes[name]

    def list_nodes(self) -> List[NodeDefinition]:
        """List all registered nodes."""
        return list(self._nodes.values())

    def list_credentials(self) -> List[CredentialDefinition]:
        """List all registered credential types."""
        return list(self._credentials.values())

    def list_packs(self) -> List[NodePackManifest]:
        """List all registered packs."""
        return list(self._packs.values())

    def __len__(self) -> int:
        """Number of registered nodes."""
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeDefinition]:
        """Iterate over node definitions."""
        return iter(self._nodes.values())

    def __contains__(self, node_type: str) -> bool:
        """Check if node type is registered."""
        return node_type in self._nodes


# Global registry instance
_global_registry: Optional[NodeRegistry] = None


def get_global_registry() -> NodeRegistry:
    """Get the global registry, with this package's own pack registered."""
    global _global_registry
    if _global_registry is None:
        from aps_nodepack.manifest import register_nodes

        _global_registry = NodeRegistry()
        _global_registry.register_pack(*register_nodes())
    return _global_registry


def reset_global_registry() -> None:
    """Reset the global registry (useful for testing)."""
    global _global_registry
    _global_registry = None


__all__ = [
    "NodeRegistry",
    "get_global_registry",
    "reset_global_registry",
    "NODE_PACK_ENTRY_POINT",
]

"""
Registry - Discovery and registration of nodes and credential types.

This package provides:
- NodeDefinition / CredentialDefinition: validated metadata
- NodePackManifest: Package metadata for a node pack
- NodeRegistry: Central registry for discovering nodes

Supports entry-points based discovery for plugin node packs.
"""

from .models import CredentialDefinition, NodeDefinition, NodePackManifest
from .registry import NodeRegistry, get_global_registry, reset_global_registry

__all__ = [
    "CredentialDefinition",
    "NodeDefinition",
    "NodePackManifest",
    "NodeRegistry",
    "get_global_registry",
    "reset_global_registry",
]

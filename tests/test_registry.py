"""Tests for node and credential registration."""
from unittest.mock import MagicMock, patch

import pytest

from aps_nodepack.credentials import AutodeskPlatformServicesOAuth2ApiCredential
from aps_nodepack.manifest import MANIFEST, register_nodes
from aps_nodepack.node_sdk import NodeOperationError, NodeRunner
from aps_nodepack.nodes import ApsDataManagementNode
from aps_nodepack.registry import NodeRegistry, get_global_registry
from aps_nodepack.registry.models import CredentialDefinition, NodeDefinition


class TestDefinitions:
    def test_node_definition(self):
        definition = NodeDefinition.from_node_class(ApsDataManagementNode)

        assert definition.node_type == "apsDataManagement"
        assert definition.display_name == "Autodesk APS - Data Management"
        assert definition.node_class == (
            "aps_nodepack.nodes.aps_data_management.ApsDataManagementNode"
        )
        names = [p.name for p in definition.parameters]
        assert names == [
            "authentication", "operation", "hubId", "projectId",
            "folderId", "itemId", "simplify", "splitItems",
        ]
        assert [c.name for c in definition.credentials] == [
            "autodeskPlatformServicesOAuth2Api",
            "autodeskPlatformServicesClientCredentialsOAuth2Api",
        ]

    def test_parameter_aliases_dump(self):
        """Dumping by alias gives back the camelCase property keys."""
        definition = NodeDefinition.from_node_class(ApsDataManagementNode)
        hub = next(p for p in definition.parameters if p.name == "hubId")
        dumped = hub.model_dump(by_alias=True)
        assert dumped["displayName"] == "Hub ID"
        assert dumped["displayOptions"] == {"show": {"operation": ["getProjects"]}}

    def test_credential_definition(self):
        definition = CredentialDefinition.from_credential_class(
            AutodeskPlatformServicesOAuth2ApiCredential
        )
        assert definition.auth_type == "oauth2"
        assert definition.extends == ["oAuth2Api"]
        types = {p.name: p.type for p in definition.properties}
        assert types["authUrl"] == "hidden"
        assert types["clientSecret"] == "password"


class TestNodeRegistry:
    def test_register_pack(self):
        registry = NodeRegistry()
        registry.register_pack(*register_nodes())

        assert "apsDataManagement" in registry
        assert len(registry) == 1
        assert registry.get_node("apsDataManagement").node_pack == "aps"
        assert registry.list_packs() == [MANIFEST]
        assert {c.name for c in registry.list_credentials()} == set(MANIFEST.credentials)

    def test_create_node(self):
        registry = NodeRegistry()
        registry.register_node(ApsDataManagementNode)

        assert isinstance(registry.create_node("apsDataManagement"), ApsDataManagementNode)
        assert registry.create_node("missing") is None

    def test_unknown_credential_class(self):
        with pytest.raises(ValueError, match="not found"):
            NodeRegistry().get_credential_class("oAuth2Api")

    def test_discover_entry_points(self):
        entry_point = MagicMock()
        entry_point.name = "aps"
        entry_point.load.return_value = register_nodes

        with patch(
            "aps_nodepack.registry.registry.entry_points", return_value=[entry_point]
        ) as mock_entry_points:
            registry = NodeRegistry()
            assert registry.discover_entry_points() == 1
            # Second call is cached
            assert registry.discover_entry_points() == 1

        mock_entry_points.assert_called_once_with(group="aps_nodepack.nodepacks")
        assert "apsDataManagement" in registry

    def test_broken_entry_point_skipped(self):
        entry_point = MagicMock()
        entry_point.name = "broken"
        entry_point.load.side_effect = ImportError("no module")

        with patch("aps_nodepack.registry.registry.entry_points", return_value=[entry_point]):
            registry = NodeRegistry()
            assert registry.discover_entry_points() == 0
        assert len(registry) == 0

    def test_global_registry_has_aps_pack(self):
        registry = get_global_registry()
        assert registry is get_global_registry()
        assert "apsDataManagement" in registry


class TestNodeRunner:
    def test_unknown_node_type(self):
        with pytest.raises(NodeOperationError, match="Unknown node type"):
            NodeRunner().run("slack", parameters={}, credentials={})

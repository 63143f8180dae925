"""
Autodesk APS Data Management node.

Reads the hub / project / folder / item hierarchy of the APS Data
Management API:
- https://aps.autodesk.com/en/docs/data/v2/reference/http/
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple
from urllib.parse import quote

from aps_nodepack.config import get_settings
from aps_nodepack.node_sdk.basenode import (
    BaseNode,
    NodeExecutionData,
    NodeOperationError,
)
from aps_nodepack.utils.jsonapi import normalize_response


logger = logging.getLogger(__name__)

JSON_API_ACCEPT = "application/vnd.api+json, application/json;q=0.9"

CREDENTIAL_BY_AUTHENTICATION = {
    "oAuth2": "autodeskPlatformServicesOAuth2Api",
    "clientCredentials": "autodeskPlatformServicesClientCredentialsOAuth2Api",
}

# operation -> (required identifiers, path template)
OPERATIONS: Dict[str, Tuple[Tuple[str, ...], str]] = {
    "getHubs": ((), "/project/v1/hubs"),
    "getProjects": (("hubId",), "/project/v1/hubs/{hubId}/projects"),
    "getTopFolders": (("projectId",), "/project/v1/projects/{projectId}/topFolders"),
    "getItems": (
        ("projectId", "folderId"),
        "/data/v1/projects/{projectId}/folders/{folderId}/contents",
    ),
    "getItemVersions": (
        ("projectId", "itemId"),
        "/data/v1/projects/{projectId}/items/{itemId}/versions",
    ),
}


def required_identifiers(operation: str) -> Tuple[str, ...]:
    if operation not in OPERATIONS:
        raise NodeOperationError(f"Unsupported operation: {operation}")
    return OPERATIONS[operation][0]


def resolve_path(operation: str, identifiers: Dict[str, Any]) -> str:
    """
    Build the API path for an operation.

    Identifiers are percent-encoded as single path segments, so "/" and
    ":" inside an URN are escaped.

    Raises:
        NodeOperationError: Unknown operation, or a required identifier is
            missing or an empty string
    """
    required = required_identifiers(operation)
    template = OPERATIONS[operation][1]

    encoded: Dict[str, str] = {}
    for name in required:
        value = identifiers.get(name)
        if value is None or value == "":
            raise NodeOperationError(
                f'Parameter "{name}" is required for operation "{operation}"'
            )
        encoded[name] = quote(str(value), safe="")

    return template.format(**encoded)


def _identifier_parameter(
    name: str,
    display_name: str,
    operations: List[str],
    description: str,
) -> Dict[str, Any]:
    return {
        "displayName": display_name,
        "name": name,
        "type": "string",
        "default": "",
        "required": True,
        "displayOptions": {"show": {"operation": operations}},
        "description": description,
    }


class ApsDataManagementNode(BaseNode):
    """
    Read data from the Autodesk Platform Services Data Management API.

    One authenticated GET per input item; the JSON:API response is either
    returned as received or flattened into one record per entity.
    """

    type = "apsDataManagement"
    version = 1

    description = {
        "displayName": "Autodesk APS - Data Management",
        "name": "apsDataManagement",
        "icon": "file:autodesk.svg",
        "group": ["transform"],
        "description": "Read data from Autodesk Platform Services Data Management API.",
        "version": 1,
        "defaults": {"name": "APS Data Management"},
        "inputs": ["main"],
        "outputs": ["main"],
        "usableAsTool": True,
    }

    properties = {
        "credentials": [
            {
                "name": "autodeskPlatformServicesOAuth2Api",
                "required": True,
                "displayOptions": {"show": {"authentication": ["oAuth2"]}},
            },
            {
                "name": "autodeskPlatformServicesClientCredentialsOAuth2Api",
                "required": True,
                "displayOptions": {"show": {"authentication": ["clientCredentials"]}},
            },
        ],
        "parameters": [
            {
                "displayName": "Authentication",
                "name": "authentication",
                "type": "options",
                "options": [
                    {"name": "OAuth2 (3-Legged)", "value": "oAuth2"},
                    {"name": "Client Credentials (2-Legged)", "value": "clientCredentials"},
                ],
                "default": "oAuth2",
            },
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "noDataExpression": True,
                "options": [
                    {"name": "Get Hubs", "value": "getHubs", "action": "List hubs available to the user", "description": "List hubs available to the user"},
                    {"name": "Get Item Versions", "value": "getItemVersions", "action": "List versions for an item", "description": "List versions for an item"},
                    {"name": "Get Items", "value": "getItems", "action": "List items for a folder", "description": "List items for a folder"},
                    {"name": "Get Projects", "value": "getProjects", "action": "List projects for a hub", "description": "List projects for a hub"},
                    {"name": "Get Top Folders", "value": "getTopFolders", "action": "List top folders of a project", "description": "List top folders of a project"},
                ],
                "default": "getHubs",
            },
            _identifier_parameter(
                "hubId", "Hub ID", ["getProjects"],
                "ID of the hub (e.g., b.123...)",
            ),
            _identifier_parameter(
                "projectId", "Project ID", ["getTopFolders", "getItems", "getItemVersions"],
                "ID of the project (e.g., b.123... or a GUID).",
            ),
            _identifier_parameter(
                "folderId", "Folder ID", ["getItems"],
                "ID of the folder (URN-style, e.g., urn:adsk.wipprod:fs.folder:co.xxxx)",
            ),
            _identifier_parameter(
                "itemId", "Item ID", ["getItemVersions"],
                "ID of the item (URN-style, e.g., urn:adsk.wipprod:dm.lineage:xxxx)",
            ),
            {
                "displayName": "Simplify",
                "name": "simplify",
                "type": "boolean",
                "default": True,
                "description": "Whether to flatten each entity into id, type, href and its attributes",
            },
            {
                "displayName": "Split Into Items",
                "name": "splitItems",
                "type": "boolean",
                "default": True,
                "description": "Whether to output one item per entity when the response holds a list",
            },
        ],
    }

    def execute(self) -> List[List[NodeExecutionData]]:
        """Run the selected operation once per input item."""
        items = self.get_input_data()
        return_data: List[NodeExecutionData] = []

        for i in range(len(items)):
            try:
                for record in self._execute_item(i):
                    if not isinstance(record, dict):
                        record = {"data": record}
                    return_data.append({"json": record, "pairedItem": {"item": i}})

            except Exception as e:
                if self.continue_on_fail():
                    self.logger.warning(
                        "Item failed, continuing: %s", e, extra=self.log_context(item_index=i)
                    )
                    return_data.append({"json": {"error": str(e)}, "pairedItem": {"item": i}})
                    continue
                if isinstance(e, NodeOperationError):
                    e.node = self
                    e.item_index = i
                    raise
                raise NodeOperationError(str(e), node=self, item_index=i) from e

        return [return_data]

    def _execute_item(self, item_index: int) -> List[Any]:
        operation = self.get_node_parameter("operation", item_index, "getHubs")
        authentication = self.get_node_parameter("authentication", item_index, "oAuth2")
        simplify = self.get_node_parameter("simplify", item_index, True)
        split_items = self.get_node_parameter("splitItems", item_index, True)

        identifiers = {
            name: self.get_node_parameter(name, item_index, "")
            for name in required_identifiers(operation)
        }
        path = resolve_path(operation, identifiers)

        credential_type = CREDENTIAL_BY_AUTHENTICATION.get(authentication)
        if credential_type is None:
            raise NodeOperationError(f"Unsupported authentication: {authentication}")

        url = f"{get_settings().aps_base_url.rstrip('/')}{path}"
        self.logger.debug(
            "GET %s", url, extra=self.log_context(item_index=item_index, operation=operation)
        )

        response = self.request_with_authentication(
            credential_type,
            "GET",
            url,
            headers={"Accept": JSON_API_ACCEPT},
        )

        return normalize_response(response, simplify=bool(simplify), split_items=bool(split_items))

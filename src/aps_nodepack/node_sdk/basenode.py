"""
BaseNode - Abstract base class for Python node implementations.

Provides the host-side contract a node relies on: parameter lookup per
item, credential lookup, input items, the continue-on-fail switch and an
authenticated request helper.

All nodes execute synchronously; items are processed one at a time.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Type,
    TypedDict,
)

from pydantic import BaseModel, ConfigDict, Field

from aps_nodepack.config import get_settings
from aps_nodepack.observability import node_context
from .http import HttpApiError, HttpClient, NodeTimeoutError

if TYPE_CHECKING:
    from aps_nodepack.credentials.base import BaseCredential


logger = logging.getLogger(__name__)


# ==============================================================================
# NodeParameterType
# ==============================================================================

NodeParameterType = Literal[
    "string", "number", "boolean", "options", "multiOptions",
    "color", "json", "collection", "dateTime", "node",
    "resourceLocator", "notice", "array", "code", "hidden", "password",
]


# ==============================================================================
# NodeParameter - Pydantic model for defining parameters
# ==============================================================================

class NodeParameter(BaseModel):
    """
    A single parameter in the node's (or credential's) properties.

    Properties are declared as plain dicts; this model validates them
    when a node or credential is registered.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Parameter key (internal name)")
    display_name: str = Field(..., alias="displayName", description="Human-readable label")
    type: NodeParameterType = Field(..., description="Parameter type")
    default: Any = Field(None, description="Default value")
    required: bool = Field(False, description="Is parameter required?")
    description: Optional[str] = Field(None, description="Help text")
    placeholder: Optional[str] = Field(None, description="Input placeholder")
    options: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Options for options/multiOptions type"
    )
    display_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="displayOptions",
        description="Conditional visibility"
    )


class NodeCredential(BaseModel):
    """Credential requirement definition."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Credential type name")
    required: bool = Field(True, description="Is credential required?")
    display_name: Optional[str] = Field(None, alias="displayName")
    display_options: Optional[Dict[str, Any]] = Field(None, alias="displayOptions")


# ==============================================================================
# NodeExecutionData - Output data format
# ==============================================================================

class NodeExecutionData(TypedDict, total=False):
    """
    Single item of execution output data.

    Format: {"json": {...}, "binary": {...}, "pairedItem": {"item": 0}}
    """
    json: Dict[str, Any]
    binary: Optional[Dict[str, Any]]
    pairedItem: Optional[Dict[str, int]]


# ==============================================================================
# BaseNode - Abstract base class
# ==============================================================================

class BaseNode(ABC):
    """
    Abstract base class for all Python node implementations.

    Nodes define:
    - type: Unique identifier (e.g., "apsDataManagement")
    - version: Node version number
    - description: Node metadata dict
    - properties: Parameters and credentials

    And implement execute() which processes input items.
    """

    type: str = "base"
    version: int = 1

    description: Dict[str, Any] = {
        "displayName": "Base Node",
        "name": "base",
        "description": "",
        "group": [],
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties: Dict[str, Any] = {
        "parameters": [],
        "credentials": [],
    }

    def __init__(self) -> None:
        """Initialize node instance."""
        self.logger = logging.getLogger(f"node.{self.type}")
        self._context: Optional[NodeExecutionContext] = None

    @abstractmethod
    def execute(self) -> List[List[NodeExecutionData]]:
        """
        Execute node operation.

        Returns:
            List[List[NodeExecutionData]]: Nested list of execution results.
            - Outer list represents output branches (usually 1)
            - Inner list represents items in that branch

        Raises:
            NodeOperationError: On operation failure
            NodeApiError: On API call failure
        """
        raise NotImplementedError

    # ==== Context Management ====

    def set_context(self, context: "NodeExecutionContext") -> None:
        """Set the execution context."""
        self._context = context

    @property
    def context(self) -> "NodeExecutionContext":
        if self._context is None:
            raise NodeOperationError("No context set", node=self)
        return self._context

    # ==== Helper methods for subclasses ====

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """
        Get parameter value.

        Args:
            name: Parameter name
            item_index: Index of item (for expression resolution)
            default: Default if not set
        """
        if self._context is None:
            return default
        return self._context.get_node_parameter(name, item_index, default)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """
        Get credentials by type name.

        Args:
            name: Credential type name (e.g., "autodeskPlatformServicesOAuth2Api")

        Returns:
            Credentials dict
        """
        return self.context.get_credentials(name)

    def get_input_data(self) -> List[Dict[str, Any]]:
        """
        Get input items from previous node.

        Returns:
            List of input items, each with 'json' key.
        """
        if self._context is None:
            return []
        return self._context.get_input_data()

    def continue_on_fail(self) -> bool:
        """True if failed items should become error items instead of aborting."""
        if self._context is None:
            return False
        return self._context.continue_on_fail

    def log_context(self, **kwargs: Any) -> Dict[str, Any]:
        """Logging extra dict tagged with the workflow and node name of the run."""
        if self._context is None:
            return node_context(**kwargs)
        return node_context(
            workflow_id=self._context.workflow_id,
            node_name=self._context.node_name,
            **kwargs,
        )

    def request_with_authentication(
        self,
        credential_type: str,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """
        Make an HTTP request authenticated with the given credential type.

        Args:
            credential_type: Credential type name
            method: HTTP method
            url: Absolute request URL
            **kwargs: Passed to HttpClient.request

        Returns:
            Parsed JSON body, or the text body for non-JSON responses
        """
        return self.context.request_with_authentication(
            credential_type, method, url, **kwargs
        )

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get full node definition for registration."""
        return {
            "type": cls.type,
            "version": cls.version,
            "description": cls.description,
            "properties": cls.properties,
        }


# ==============================================================================
# NodeExecutionContext - Runtime context for node execution
# ==============================================================================

# Matches "={{ $json.field }}", "{{ $json.a.b }}" and '{{ $json["some field"] }}'
_JSON_EXPRESSION = re.compile(
    r'^=?\{\{\s*\$json((?:\.[A-Za-z_][\w]*|\["[^"]+"\])+)\s*\}\}$'
)
_JSON_PATH_PART = re.compile(r'\.([A-Za-z_][\w]*)|\["([^"]+)"\]')

CredentialResolver = Callable[[str], Type["BaseCredential"]]


class NodeExecutionContext:
    """
    Runtime context provided to nodes during execution.

    Provides access to:
    - Parameters (with $json field references resolved per item)
    - Credentials
    - Input data
    - The authenticated HTTP transport
    """

    def __init__(
        self,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: List[Dict[str, Any]],
        continue_on_fail: bool = False,
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
        credential_resolver: Optional[CredentialResolver] = None,
    ) -> None:
        self._parameters = parameters
        self._credentials = credentials
        self._input_data = input_data
        self.continue_on_fail = continue_on_fail
        self.workflow_id = workflow_id
        self.node_name = node_name
        self._credential_resolver = credential_resolver

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """Get parameter value, resolving a $json field reference against the item."""
        value = self._parameters.get(name, default)
        if isinstance(value, str):
            match = _JSON_EXPRESSION.match(value.strip())
            if match:
                return self._resolve_json_path(match.group(1), item_index)
        return value

    def _resolve_json_path(self, path: str, item_index: int) -> Any:
        if item_index >= len(self._input_data):
            return None
        current: Any = self._input_data[item_index].get("json", {})
        for attr, key in _JSON_PATH_PART.findall(path):
            if not isinstance(current, dict):
                return None
            current = current.get(attr or key)
        return current

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """Get credentials by type name."""
        if name not in self._credentials:
            raise NodeOperationError(f"Credentials '{name}' not found")
        return self._credentials[name]

    def update_credentials(self, name: str, data: Dict[str, Any]) -> None:
        """Replace stored credential data (e.g. after a token refresh)."""
        self._credentials[name] = data

    def get_input_data(self) -> List[Dict[str, Any]]:
        """Get input items."""
        return self._input_data

    def _resolve_credential_class(self, name: str) -> Type["BaseCredential"]:
        if self._credential_resolver is not None:
            return self._credential_resolver(name)
        # Imported here to avoid circular imports
        from aps_nodepack.credentials import get_credential_by_type
        return get_credential_by_type(name)

    def request_with_authentication(
        self,
        credential_type: str,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """
        Make an HTTP request authenticated with a stored OAuth2 credential.

        Obtains an access token (refreshing or fetching one when needed),
        stores any new token data back into the context, places the
        token in the Authorization header and performs a single request.

        Raises:
            NodeOperationError: If credentials are missing
            TokenRefreshError: If no access token can be obtained
            NodeApiError: On a non-2xx response or transport failure
        """
        credential_class = self._resolve_credential_class(credential_type)
        credential = credential_class(self.get_credentials(credential_type))

        access_token, new_token_data = credential.get_access_token()
        if new_token_data is not None:
            updated = dict(credential.data)
            updated["oauthTokenData"] = new_token_data
            self.update_credentials(credential_type, updated)
            logger.debug("Stored refreshed token data for %s", credential_type)

        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(credential.get_auth_headers(access_token))
        client = HttpClient(timeout=get_settings().request_timeout_s)

        try:
            response = client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except HttpApiError as e:
            raise NodeApiError(
                str(e),
                status_code=e.status_code,
                response_body=e.response_body,
            ) from e
        except NodeTimeoutError as e:
            raise NodeApiError(str(e)) from e

        return response.body()


# ==============================================================================
# Errors
# ==============================================================================

class NodeOperationError(Exception):
    """Error during node operation."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        item_index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.node = node
        self.item_index = item_index
        super().__init__(message)


class NodeApiError(NodeOperationError):
    """Error from external API call."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        super().__init__(message, node)
        self.status_code = status_code
        self.response_body = response_body


__all__ = [
    "BaseNode",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodeParameter",
    "NodeCredential",
    "NodeParameterType",
    "NodeOperationError",
    "NodeApiError",
]

"""
Node SDK - Minimal Python node execution semantics.

This package provides the runtime the APS nodes execute in:
- BaseNode: Abstract base class for node implementations
- NodeExecutionContext: Runtime context for a node, including the
  authenticated HTTP transport
- NodeRunner: Builds a context and runs a registered node
- HttpClient: Timeout-bounded requests wrapper

All nodes execute synchronously.
"""

from .basenode import (
    BaseNode,
    NodeExecutionContext,
    NodeExecutionData,
    NodeParameter,
    NodeCredential,
    NodeParameterType,
    NodeOperationError,
    NodeApiError,
)
from .http import HttpApiError, HttpClient, HttpResponse, NodeTimeoutError
from .executor import NodeRunner

__all__ = [
    "NodeExecutionData",
    # Context
    "NodeExecutionContext",
    # Base class
    "BaseNode",
    "NodeParameter",
    "NodeCredential",
    "NodeParameterType",
    # Errors
    "NodeOperationError",
    "NodeApiError",
    "HttpApiError",
    "NodeTimeoutError",
    # Runner
    "NodeRunner",
    # HTTP
    "HttpClient",
    "HttpResponse",
]

"""
Node Runner - executes a single registered node.

Resolves the node class and credential types from a registry, builds the
execution context and runs the node. Items are processed serially by the
node itself.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .basenode import NodeExecutionContext, NodeExecutionData, NodeOperationError

if TYPE_CHECKING:
    from aps_nodepack.registry import NodeRegistry


logger = logging.getLogger(__name__)


class NodeRunner:
    """
    Runs nodes by type.

    Usage:
        runner = NodeRunner()
        output = runner.run(
            "apsDataManagement",
            parameters={"operation": "getHubs"},
            credentials={"autodeskPlatformServicesOAuth2Api": {...}},
        )
    """

    def __init__(self, registry: Optional["NodeRegistry"] = None):
        if registry is None:
            from aps_nodepack.registry import get_global_registry
            registry = get_global_registry()
        self._registry = registry

    def run(
        self,
        node_type: str,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: Optional[List[Dict[str, Any]]] = None,
        continue_on_fail: bool = False,
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
    ) -> List[List[NodeExecutionData]]:
        """
        Execute a node.

        Args:
            node_type: Registered node type
            parameters: Node parameters
            credentials: Map of credential type -> credential data
            input_data: Input items; a single empty item when omitted
            continue_on_fail: Emit error items instead of raising

        Returns:
            Output data: branches of items

        Raises:
            NodeOperationError: Unknown node type, or a failed item when
                continue_on_fail is off
        """
        node = self._registry.create_node(node_type)
        if node is None:
            raise NodeOperationError(f"Unknown node type: {node_type}")

        context = NodeExecutionContext(
            parameters=parameters,
            credentials=credentials,
            input_data=input_data if input_data is not None else [{"json": {}}],
            continue_on_fail=continue_on_fail,
            workflow_id=workflow_id,
            node_name=node_name,
            credential_resolver=self._registry.get_credential_class,
        )
        node.set_context(context)

        start_time = time.perf_counter()
        output = node.execute()
        logger.info(
            "Node %s finished in %.1f ms with %d items",
            node_type,
            (time.perf_counter() - start_time) * 1000,
            sum(len(branch) for branch in output),
        )
        return output

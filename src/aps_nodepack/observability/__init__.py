"""Observability package."""
from aps_nodepack.observability.logging import node_context, setup_logging

__all__ = ["node_context", "setup_logging"]

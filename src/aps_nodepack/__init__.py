"""
APS Node Pack

Autodesk Platform Services (APS) nodes for n8n-style workflows:
- credentials/: authorization-code and client-credentials OAuth2 types
- nodes/: the APS Data Management node
- node_sdk/: node execution semantics (BaseNode, context, HTTP transport)
- registry/: node and credential discovery
"""

__version__ = "1.0.0"

"""
Base credential type.

A credential type declares its properties (n8n-style property dicts),
optionally the credential types it extends, and an optional test request
used to verify stored credential data.
"""
from typing import Any, ClassVar, Dict, List, Optional

from aps_nodepack.node_sdk.http import HttpApiError, HttpClient, NodeTimeoutError


class BaseCredential:
    """Base class for all credential types"""

    name: ClassVar[str] = "base"
    display_name: ClassVar[str] = "Base Credential"
    documentation_url: ClassVar[Optional[str]] = None
    extends: ClassVar[List[str]] = []
    properties: ClassVar[List[Dict[str, Any]]] = []

    # {"baseURL": ..., "url": ..., "method": "GET"}
    test_request: ClassVar[Optional[Dict[str, Any]]] = None

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = self.resolve_data(data or {})

    @classmethod
    def resolve_data(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay supplied credential data on the property defaults.

        Hidden properties are fixed by the credential type, so their
        defaults always win over supplied values.
        """
        resolved: Dict[str, Any] = {}
        for prop in cls.properties:
            if "default" in prop:
                resolved[prop["name"]] = prop["default"]
        resolved.update(data)
        for prop in cls.properties:
            if prop.get("type") == "hidden" and "default" in prop:
                resolved[prop["name"]] = prop["default"]
        return resolved

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get credential type definition"""
        return {
            "name": cls.name,
            "displayName": cls.display_name,
            "documentationUrl": cls.documentation_url,
            "extends": list(cls.extends),
            "properties": cls.properties,
            "test": cls.test_request,
        }

    def get_auth_headers(self, access_token: str) -> Dict[str, str]:
        """Headers that authenticate a request with this credential"""
        return {}

    def test(self) -> Dict[str, Any]:
        """Run the test request; any non-error HTTP response counts as success"""
        if not self.test_request:
            return {"success": True, "message": "Credential type has no test request"}

        try:
            headers = self.get_auth_headers(self.get_access_token()[0])
        except Exception as e:
            return {"success": False, "message": f"Could not obtain access token: {e}"}

        client = HttpClient(base_url=self.test_request.get("baseURL", ""))
        try:
            response = client.request(
                self.test_request.get("method", "GET"),
                self.test_request["url"],
                headers=headers,
            )
        except (HttpApiError, NodeTimeoutError) as e:
            return {"success": False, "message": f"Connection error: {e}"}

        if not response.ok:
            return {
                "success": False,
                "message": f"Credential test failed with HTTP {response.status_code}",
                "status_code": response.status_code,
            }
        return {
            "success": True,
            "message": "Connection tested successfully",
            "status_code": response.status_code,
        }

    def get_access_token(self):
        """Return (access_token, new_token_data_or_None)"""
        raise NotImplementedError(f"{self.name} does not issue access tokens")

"""
Autodesk Platform Services OAuth2 API credential (authorization code, 3-legged).
Docs: https://aps.autodesk.com/en/docs/oauth/v2
"""
from typing import Any, ClassVar, Dict, List

from .oauth2_api import OAuth2ApiCredential

APS_BASE_URL = "https://developer.api.autodesk.com"
APS_AUTH_URL = f"{APS_BASE_URL}/authentication/v2/authorize"
APS_TOKEN_URL = f"{APS_BASE_URL}/authentication/v2/token"

# Covers common Data Management use cases; users can edit
DEFAULT_SCOPES = "data:read data:write bucket:read bucket:create"

# Listing OSS buckets works with the default scopes
TEST_REQUEST = {"baseURL": APS_BASE_URL, "url": "/oss/v2/buckets", "method": "GET"}


def build_aps_properties(hidden_defaults: Dict[str, Any], scope_description: str) -> List[Dict[str, Any]]:
    """Build APS properties from the generic OAuth2 ones.

    Fields in hidden_defaults become hidden with the given default, generic
    fields the APS flow does not use are dropped, scope stays editable.
    """
    kept = {"clientId", "clientSecret", "scope", "oauthTokenData", *hidden_defaults}
    modified_props: List[Dict[str, Any]] = []

    for prop in OAuth2ApiCredential.properties:
        if prop["name"] not in kept:
            continue
        prop_copy = prop.copy()

        if prop_copy["name"] in hidden_defaults:
            prop_copy.pop("options", None)
            prop_copy.update({
                "type": "hidden",
                "default": hidden_defaults[prop_copy["name"]],
                "required": False,
            })

        if prop_copy["name"] == "scope":
            prop_copy.update({
                "displayName": "Scopes",
                "default": DEFAULT_SCOPES,
                "description": scope_description,
            })

        modified_props.append(prop_copy)

    return modified_props


class AutodeskPlatformServicesOAuth2ApiCredential(OAuth2ApiCredential):
    """APS credential for user-context (3-legged) access"""

    name = "autodeskPlatformServicesOAuth2Api"
    display_name = "Autodesk Platform Services OAuth2 API"
    documentation_url = "https://aps.autodesk.com/en/docs/oauth/v2"
    extends = ["oAuth2Api"]

    properties: ClassVar[List[Dict[str, Any]]] = build_aps_properties(
        {
            "authUrl": APS_AUTH_URL,
            "accessTokenUrl": APS_TOKEN_URL,
            "grantType": "authorizationCode",
            "tokenType": "Bearer",
            "authentication": "header",
        },
        "Space-separated OAuth scopes. Adjust for your APS use case.",
    )

    test_request = TEST_REQUEST

"""
Autodesk Platform Services OAuth2 credential using the client credentials
grant (2-legged, app-only). Only the token endpoint is involved.
"""
from typing import Any, ClassVar, Dict, List

from .aps_oauth2_api import APS_TOKEN_URL, TEST_REQUEST, build_aps_properties
from .oauth2_api import OAuth2ApiCredential


class AutodeskPlatformServicesClientCredentialsOAuth2ApiCredential(OAuth2ApiCredential):
    """APS credential for app-only (2-legged) access"""

    name = "autodeskPlatformServicesClientCredentialsOAuth2Api"
    display_name = "Autodesk Platform Services Client Credentials OAuth2 API"
    documentation_url = "https://aps.autodesk.com/en/docs/oauth/v2"
    extends = ["oAuth2Api"]

    properties: ClassVar[List[Dict[str, Any]]] = build_aps_properties(
        {
            "accessTokenUrl": APS_TOKEN_URL,
            "grantType": "clientCredentials",
            "tokenType": "Bearer",
            "authentication": "header",
        },
        "Space-separated OAuth scopes for APS 2-legged flow.",
    )

    # Many 2-legged APIs need more context; listing buckets is a minimal permission check
    test_request = TEST_REQUEST

    def get_authorization_url(self, state: str, redirect_uri: str) -> str:
        raise ValueError("The client credentials grant has no authorization step")

"""
OAuth2 API credential for service authentication.
Stateless design - returns new token data without persisting it; the
caller (the execution context) decides where to store it.
"""
import base64
import hashlib
import json
import logging
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlencode

from aps_nodepack.config import get_settings
from aps_nodepack.node_sdk.http import HttpApiError, HttpClient, HttpResponse, NodeTimeoutError

from .base import BaseCredential

logger = logging.getLogger(__name__)

# Errors after which the stored grant is unusable
REAUTH_ERRORS = ("invalid_grant", "unauthorized_client", "access_denied", "invalid_client")


class TokenRefreshError(Exception):
    """Raised when an access token cannot be obtained"""

    def __init__(self, message: str, needs_reauth: bool = False, error_code: Optional[str] = None):
        super().__init__(message)
        self.needs_reauth = needs_reauth
        self.error_code = error_code  # e.g., "invalid_grant", "network_error"


class OAuth2ApiCredential(BaseCredential):
    """OAuth2 API credential implementation"""

    name = "oAuth2Api"
    display_name = "OAuth2 API"

    properties = [
        {
            "name": "clientId",
            "displayName": "Client ID",
            "type": "string",
            "required": True,
        },
        {
            "name": "clientSecret",
            "displayName": "Client Secret",
            "type": "password",
            "required": True,
        },
        {
            "name": "authUrl",
            "displayName": "Authorization URL",
            "type": "string",
            "required": True,
        },
        {
            "name": "accessTokenUrl",
            "displayName": "Access Token URL",
            "type": "string",
            "required": True,
        },
        {
            "name": "scope",
            "displayName": "Scope",
            "type": "string",
            "required": False,
        },
        {
            "name": "grantType",
            "displayName": "Grant Type",
            "type": "options",
            "options": [
                {"name": "Authorization Code", "value": "authorizationCode"},
                {"name": "Client Credentials", "value": "clientCredentials"},
                {"name": "PKCE", "value": "pkce"},
            ],
            "default": "authorizationCode",
            "required": True,
        },
        {
            "name": "authentication",
            "displayName": "Authentication",
            "type": "options",
            "options": [
                {"name": "Header", "value": "header"},
                {"name": "Body", "value": "body"},
            ],
            "default": "header",
            "required": True,
        },
        {
            "name": "tokenType",
            "displayName": "Token Type",
            "type": "string",
            "default": "Bearer",
            "required": False,
        },
        {
            "name": "authQueryParameters",
            "displayName": "Auth Query Parameters",
            "type": "string",
            "required": False,
            "placeholder": "access_type=offline&prompt=consent",
        },
        # OAuth token data (stored after successful auth)
        {
            "name": "oauthTokenData",
            "displayName": "OAuth Token Data",
            "type": "json",
            "required": False,
        },
    ]

    @staticmethod
    def has_access_token(credentials_data: Dict[str, Any]) -> bool:
        """Check if credentials carry an access token"""
        oauth_token_data = credentials_data.get("oauthTokenData")
        if not isinstance(oauth_token_data, dict):
            return False
        return bool(oauth_token_data.get("access_token"))

    @staticmethod
    def is_token_expired(oauth_data: Dict[str, Any]) -> bool:
        """Check if a token is expired, with a clock skew buffer"""
        if not oauth_data.get("access_token"):
            return True
        if "expires_at" not in oauth_data:
            # No expiry info but has token - assume valid
            return False
        buffer = get_settings().token_expiry_buffer_s
        return time.time() > (oauth_data["expires_at"] - buffer)

    @staticmethod
    def _parse_oauth_error(error_data: Dict[str, Any], status_code: int) -> TokenRefreshError:
        """Parse an OAuth error response into a typed exception"""
        error = error_data.get("error", "")
        desc = error_data.get("error_description", "")

        if error in REAUTH_ERRORS:
            return TokenRefreshError(
                desc or f"OAuth error: {error}",
                needs_reauth=True,
                error_code=error,
            )

        return TokenRefreshError(
            desc or f"OAuth error ({status_code}): {error}",
            needs_reauth=False,
            error_code=error or None,
        )

    def get_auth_headers(self, access_token: str) -> Dict[str, str]:
        """Place the token in the Authorization header"""
        token_type = self.data.get("tokenType") or "Bearer"
        return {"Authorization": f"{token_type} {access_token}"}

    def _client_auth(self, body: Dict[str, Any]) -> Dict[str, str]:
        """Add client authentication to a token request; returns the headers"""
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        if self.data.get("authentication", "header") == "header":
            auth = base64.b64encode(
                f"{self.data['clientId']}:{self.data['clientSecret']}".encode()
            ).decode()
            headers["Authorization"] = f"Basic {auth}"
        else:
            body["client_id"] = self.data["clientId"]
            body["client_secret"] = self.data["clientSecret"]
        return headers

    def _token_request(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the token endpoint and return the decoded token response"""
        headers = self._client_auth(body)
        client = HttpClient()

        try:
            response = client.post(
                self.data.get("accessTokenUrl", ""),
                data=urlencode(body),
                headers=headers,
            )
        except NodeTimeoutError as e:
            raise TokenRefreshError("Request timed out", error_code="timeout") from e
        except HttpApiError as e:
            raise TokenRefreshError(f"Network error: {e}", error_code="network_error") from e

        if not response.ok:
            raise self._parse_oauth_error(self._error_body(response), response.status_code)

        try:
            token_data = response.json()
        except ValueError as e:
            raise TokenRefreshError(
                "Token endpoint returned a non-JSON body", error_code="invalid_response"
            ) from e

        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise TokenRefreshError(
                "Token endpoint response has no access_token", error_code="invalid_response"
            )
        return token_data

    @staticmethod
    def _error_body(response: HttpResponse) -> Dict[str, Any]:
        try:
            err = json.loads(response.text)
        except ValueError:
            return {"error": response.text[:200]}
        return err if isinstance(err, dict) else {"error": str(err)[:200]}

    @staticmethod
    def _with_expiry(token_data: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(token_data)
        if "expires_in" in result:
            result["expires_at"] = time.time() + result["expires_in"]
        return result

    def get_authorization_url(self, state: str, redirect_uri: str) -> str:
        """Generate the authorization-code URL the user is sent to"""
        params = {
            "response_type": "code",
            "client_id": self.data["clientId"],
            "redirect_uri": redirect_uri,
            "state": state,
        }

        if self.data.get("scope"):
            params["scope"] = self.data["scope"]

        if self.data.get("authQueryParameters"):
            for key, values in parse_qs(self.data["authQueryParameters"]).items():
                if values:
                    params[key] = values[0]

        if self.data.get("grantType") == "pkce" and self.data.get("codeVerifier"):
            code_challenge = base64.urlsafe_b64encode(
                hashlib.sha256(self.data["codeVerifier"].encode()).digest()
            ).decode().rstrip("=")
            params.update({
                "code_challenge": code_challenge,
                "code_challenge_method": "S256",
            })

        return f"{self.data.get('authUrl', '')}?{urlencode(params)}"

    def exchange_code_for_token(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """Exchange an authorization code for token data"""
        body = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        if self.data.get("grantType") == "pkce" and self.data.get("codeVerifier"):
            body["code_verifier"] = self.data["codeVerifier"]

        return self._with_expiry(self._token_request(body))

    def fetch_client_credentials_token(self) -> Dict[str, Any]:
        """Obtain app-only token data with the client credentials grant"""
        body = {"grant_type": "client_credentials"}
        if self.data.get("scope"):
            body["scope"] = self.data["scope"]

        logger.debug("Requesting client credentials token for %s", self.name)
        return self._with_expiry(self._token_request(body))

    def refresh_token(self) -> Dict[str, Any]:
        """
        Refresh the OAuth2 access token.

        Returns new token data WITHOUT modifying self.data.
        Caller is responsible for persisting if needed.

        Raises:
            TokenRefreshError: On failure with needs_reauth flag
        """
        oauth_data = self.data.get("oauthTokenData") or {}
        refresh_token = oauth_data.get("refresh_token")

        if not refresh_token:
            raise TokenRefreshError(
                "No refresh token available", needs_reauth=True, error_code="no_refresh_token"
            )

        data = self._token_request({"grant_type": "refresh_token", "refresh_token": refresh_token})

        # Merge with existing token data; refresh tokens may rotate
        result = dict(oauth_data)
        result["access_token"] = data["access_token"]
        result["expires_at"] = time.time() + data.get("expires_in", 3600)
        for key, value in data.items():
            if key not in ("access_token", "expires_in"):
                result[key] = value

        logger.info("Refreshed access token for %s", self.name)
        return result

    def get_access_token(self) -> Tuple[str, Optional[Dict[str, Any]]]:
        """
        Get a usable access token.

        Returns:
            (access_token, new_token_data) where new_token_data is None when
            the stored token was still valid.
        """
        oauth_data = self.data.get("oauthTokenData") or {}

        if not self.is_token_expired(oauth_data):
            return oauth_data["access_token"], None

        if self.data.get("grantType") == "clientCredentials":
            new_oauth_data = self.fetch_client_credentials_token()
        elif not self.has_access_token(self.data):
            raise TokenRefreshError(
                "OAuth credentials not connected. Please connect your account first.",
                needs_reauth=True,
                error_code="not_connected",
            )
        else:
            new_oauth_data = self.refresh_token()

        return new_oauth_data["access_token"], new_oauth_data

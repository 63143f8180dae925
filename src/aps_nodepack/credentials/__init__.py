"""
Credentials package for the APS node pack.
Each credential type has its own module with definition and testing capabilities.
"""
from typing import Dict, List, Type

from .base import BaseCredential
from .oauth2_api import OAuth2ApiCredential, TokenRefreshError
from .aps_oauth2_api import AutodeskPlatformServicesOAuth2ApiCredential
from .aps_client_credentials_oauth2_api import (
    AutodeskPlatformServicesClientCredentialsOAuth2ApiCredential,
)

# Registry of all available credential types
CREDENTIAL_TYPES: Dict[str, Type[BaseCredential]] = {
    "oAuth2Api": OAuth2ApiCredential,
    "autodeskPlatformServicesOAuth2Api": AutodeskPlatformServicesOAuth2ApiCredential,
    "autodeskPlatformServicesClientCredentialsOAuth2Api": (
        AutodeskPlatformServicesClientCredentialsOAuth2ApiCredential
    ),
}


def get_all_credentials() -> List[Dict]:
    """Get all credential type definitions"""
    return [
        cred_class.get_definition() | {"is_oauth2": issubclass(cred_class, OAuth2ApiCredential)}
        for cred_class in CREDENTIAL_TYPES.values()
    ]


def get_credential_by_type(credential_type: str) -> Type[BaseCredential]:
    """Get credential class by type name"""
    if credential_type not in CREDENTIAL_TYPES:
        raise ValueError(f"Credential type '{credential_type}' not found")
    return CREDENTIAL_TYPES[credential_type]


__all__ = [
    "BaseCredential",
    "OAuth2ApiCredential",
    "TokenRefreshError",
    "AutodeskPlatformServicesOAuth2ApiCredential",
    "AutodeskPlatformServicesClientCredentialsOAuth2ApiCredential",
    "CREDENTIAL_TYPES",
    "get_all_credentials",
    "get_credential_by_type",
]

"""
Token acquisition for the Azure management API

The signed-in user's object id is read from the management token itself so the
vault can grant that user certificate permissions.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt
from azure.core.credentials import AccessToken
from azure.identity import InteractiveBrowserCredential

MANAGEMENT_SCOPE = "https://management.azure.com/.default"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcquireTokenResult:
    """Management access token plus the object id of the user it was issued to"""
    access_token: str
    user_object_id: str
    expires_on: int

    def as_token_credential(self) -> "StaticTokenCredential":
        return StaticTokenCredential(self.access_token, self.expires_on)


class StaticTokenCredential:
    """
    Wraps an already-acquired bearer token so azure-mgmt clients accept it.

    The token is never refreshed; once it expires the management calls fail with
    ClientAuthenticationError.
    """

    def __init__(self, token: str, expires_on: int):
        self._access_token = AccessToken(token, expires_on)

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        return self._access_token

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def read_token_claims(token: str) -> Dict[str, Any]:
    """
    Decode the claims of a JWT access token without verifying its signature.

    The token is only inspected for the signed-in user's identity; Azure
    Resource Manager validates it on every call.

    Args:
        token: Encoded JWT (header.payload.signature)

    Returns:
        Dict of token claims

    Raises:
        ValueError: If the token is not a decodable JWT
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise ValueError(f"Access token could not be decoded: {e}")


def acquire_token(tenant_id: str, credential: Optional[Any] = None) -> AcquireTokenResult:
    """
    Acquire a management API token and resolve the signed-in user's object id.

    Args:
        tenant_id: Azure AD tenant to sign in to
        credential: azure-identity credential to use; defaults to an interactive
            browser sign-in for the tenant

    Returns:
        AcquireTokenResult: Token, user object id and expiry

    Raises:
        ValueError: If the token carries no 'oid' claim
    """
    if credential is None:
        credential = InteractiveBrowserCredential(tenant_id=tenant_id)

    logger.info(f"🔑 Acquiring Azure management token for tenant {tenant_id}")
    token = credential.get_token(MANAGEMENT_SCOPE)

    claims = read_token_claims(token.token)
    user_object_id = claims.get("oid")
    if not user_object_id:
        raise ValueError("Access token has no 'oid' claim; sign in with a user or service principal account")

    expires_on = token.expires_on or int(claims.get("exp", time.time()))
    logger.info(f"✅ Signed in as {claims.get('upn') or claims.get('unique_name') or user_object_id}")

    return AcquireTokenResult(
        access_token=token.token,
        user_object_id=user_object_id,
        expires_on=expires_on,
    )

"""
Key Vault access policies for the PKI sample

The invoking user manages certificates; each certificate-authority function app
identity may only sign with vault keys and read certificates.
"""
from typing import Iterable, List

from azure.mgmt.keyvault.models import AccessPolicyEntry, Permissions

USER_CERTIFICATE_PERMISSIONS = ["list", "get", "create", "update", "delete"]
# Needed to sign locally while testing and debugging the functions
USER_KEY_PERMISSIONS = ["sign"]

CERTIFICATE_AUTHORITY_KEY_PERMISSIONS = ["sign"]
CERTIFICATE_AUTHORITY_CERTIFICATE_PERMISSIONS = ["get"]


def user_access_policy(tenant_id: str, user_object_id: str) -> AccessPolicyEntry:
    return AccessPolicyEntry(
        tenant_id=tenant_id,
        object_id=user_object_id,
        permissions=Permissions(
            keys=list(USER_KEY_PERMISSIONS),
            certificates=list(USER_CERTIFICATE_PERMISSIONS),
        ),
    )


def certificate_authority_access_policy(tenant_id: str, principal_id: str) -> AccessPolicyEntry:
    return AccessPolicyEntry(
        tenant_id=tenant_id,
        object_id=principal_id,
        permissions=Permissions(
            keys=list(CERTIFICATE_AUTHORITY_KEY_PERMISSIONS),
            certificates=list(CERTIFICATE_AUTHORITY_CERTIFICATE_PERMISSIONS),
        ),
    )


def build_access_policies(
    tenant_id: str,
    user_object_id: str,
    certificate_authority_principal_ids: Iterable[str]
) -> List[AccessPolicyEntry]:
    """
    Build the vault access policies: the user first, then one entry per
    certificate-authority identity.

    Raises:
        ValueError: If user_object_id is empty
    """
    if not user_object_id:
        raise ValueError("user_object_id is required")

    policies = [user_access_policy(tenant_id, user_object_id)]
    for principal_id in certificate_authority_principal_ids:
        policies.append(certificate_authority_access_policy(tenant_id, principal_id))
    return policies

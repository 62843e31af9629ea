"""
Azure management SDK clients used by the provisioning routine
"""
from dataclasses import dataclass
from typing import Any

from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.storage import StorageManagementClient
from azure.mgmt.web import WebSiteManagementClient


@dataclass
class AzureClients:
    """Management clients sharing one credential and subscription"""
    resource: ResourceManagementClient
    storage: StorageManagementClient
    web: WebSiteManagementClient
    key_vault: KeyVaultManagementClient

    @classmethod
    def create(cls, credential: Any, subscription_id: str) -> "AzureClients":
        return cls(
            resource=ResourceManagementClient(credential=credential, subscription_id=subscription_id),
            storage=StorageManagementClient(credential=credential, subscription_id=subscription_id),
            web=WebSiteManagementClient(credential=credential, subscription_id=subscription_id),
            key_vault=KeyVaultManagementClient(credential=credential, subscription_id=subscription_id),
        )

    def close(self) -> None:
        for client in (self.resource, self.storage, self.web, self.key_vault):
            client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

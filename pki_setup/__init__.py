"""
PKI Setup Module

Provisions the Azure resources used by the build PKI sample: resource group,
storage account, consumption plan, certificate authority function apps and the
key vault that holds the CA keys.
"""

from .config import ProvisioningConfig
from .credentials import AcquireTokenResult, StaticTokenCredential, acquire_token
from .clients import AzureClients
from .resource_management import ProvisioningResult, ProvisioningStatus, provision

__all__ = [
    'ProvisioningConfig',
    'AcquireTokenResult',
    'StaticTokenCredential',
    'acquire_token',
    'AzureClients',
    'ProvisioningResult',
    'ProvisioningStatus',
    'provision'
]

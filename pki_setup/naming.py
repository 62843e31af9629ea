"""
Azure resource names for the PKI sample.

Every name is derived from the configured resource-name prefix:

    - Resource Group:   {prefix}
    - Storage Account:  {prefix lower-cased}storage
    - App Service Plan: {prefix}Plan
    - Function Apps:    {prefix}NewCerts, {prefix}RenewCerts
    - Key Vault:        {prefix}Vault

The prefix is validated by ProvisioningConfig so the storage account name stays
within 24 lowercase alphanumeric characters.
"""


class ResourceNames:
    """Resource names derived from a resource-name prefix"""

    def __init__(self, prefix: str):
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def resource_group(self) -> str:
        return self._prefix

    def storage_account(self) -> str:
        return f"{self._prefix.lower()}storage"

    def app_service_plan(self) -> str:
        return f"{self._prefix}Plan"

    def new_certs_function_app(self) -> str:
        """Function app that issues new certificates."""
        return f"{self._prefix}NewCerts"

    def renew_certs_function_app(self) -> str:
        """Function app that renews certificates (client certificates enabled)."""
        return f"{self._prefix}RenewCerts"

    def vault(self) -> str:
        return f"{self._prefix}Vault"

    def function_app_content_share(self, function_app_name: str) -> str:
        # File share names must be lowercase
        return function_app_name.lower()

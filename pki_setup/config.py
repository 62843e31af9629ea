"""
Provisioning configuration for the PKI sample Azure resources
"""
import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

# Environment variables read by ProvisioningConfig.from_env()
SUBSCRIPTION_ID_VAR = "AZURE_SUBSCRIPTION_ID"
TENANT_ID_VAR = "AZURE_TENANT_ID"
REGION_VAR = "AZURE_REGION"
RESOURCE_NAME_PREFIX_VAR = "RESOURCE_NAME_PREFIX"

# "<prefix>storage" must fit the 24 character storage account limit
MAX_PREFIX_LENGTH = 24 - len("storage")

_GUID_PATTERN = re.compile(r"^[0-9a-fA-F]{8}-([0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}$")
_REGION_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")
_PREFIX_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


@dataclass(frozen=True)
class ProvisioningConfig:
    """Where and under which names the PKI resources are created"""
    subscription_id: str
    tenant_id: str
    region_name: str
    resource_name_prefix: str

    def __post_init__(self):
        for field_name in ("subscription_id", "tenant_id", "region_name", "resource_name_prefix"):
            if not getattr(self, field_name):
                raise ValueError(f"Missing required configuration value '{field_name}'")

        if not _GUID_PATTERN.match(self.subscription_id):
            raise ValueError(f"subscription_id must be a GUID, got '{self.subscription_id}'")
        if not _GUID_PATTERN.match(self.tenant_id):
            raise ValueError(f"tenant_id must be a GUID, got '{self.tenant_id}'")
        if not _REGION_PATTERN.match(self.region_name):
            raise ValueError(
                f"region_name must be a lowercase Azure region name (e.g. 'westus'), got '{self.region_name}'"
            )
        if not _PREFIX_PATTERN.match(self.resource_name_prefix):
            raise ValueError(
                "resource_name_prefix must start with a letter and contain only letters and digits, "
                f"got '{self.resource_name_prefix}'"
            )
        if len(self.resource_name_prefix) > MAX_PREFIX_LENGTH:
            raise ValueError(
                f"resource_name_prefix must be at most {MAX_PREFIX_LENGTH} characters, "
                f"got {len(self.resource_name_prefix)}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProvisioningConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            ProvisioningConfig: Validated configuration

        Raises:
            ValueError: If a variable is missing or invalid
        """
        environ = os.environ if environ is None else environ
        return cls(
            subscription_id=environ.get(SUBSCRIPTION_ID_VAR, "").strip(),
            tenant_id=environ.get(TENANT_ID_VAR, "").strip(),
            region_name=environ.get(REGION_VAR, "").strip(),
            resource_name_prefix=environ.get(RESOURCE_NAME_PREFIX_VAR, "").strip(),
        )

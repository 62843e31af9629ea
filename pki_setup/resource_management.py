"""
Azure resource provisioning for the PKI sample

Creates, in order, the resource group, the storage account and consumption
app service plan, the new-certs and renew-certs function apps (each with a
system-assigned managed identity), and finally the Key Vault whose access
policies reference both identities. Every call is create-or-update, so a run
that failed part way can simply be repeated.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

from azure.core.exceptions import AzureError, ClientAuthenticationError, HttpResponseError
from azure.mgmt.keyvault.models import Sku as VaultSku
from azure.mgmt.keyvault.models import Vault, VaultCreateOrUpdateParameters, VaultProperties
from azure.mgmt.storage.models import Sku as StorageSku
from azure.mgmt.storage.models import StorageAccount, StorageAccountCreateParameters
from azure.mgmt.web.models import (
    AppServicePlan,
    ManagedServiceIdentity,
    NameValuePair,
    Site,
    SiteConfig,
    SkuDescription,
)

from .access_policies import build_access_policies
from .clients import AzureClients
from .config import ProvisioningConfig
from .credentials import AcquireTokenResult
from .naming import ResourceNames

FUNCTIONS_EXTENSION_VERSION = "~4"
FUNCTIONS_WORKER_RUNTIME = "dotnet"

logger = logging.getLogger(__name__)


class ProvisioningStatus(Enum):
    CREATED = "created"
    SKIPPED = "skipped"


@dataclass
class ProvisioningResult:
    """Outcome of a provisioning run"""
    status: ProvisioningStatus
    resource_group: str
    storage_account: Optional[str] = None
    app_service_plan: Optional[str] = None
    new_certs_function_app: Optional[str] = None
    renew_certs_function_app: Optional[str] = None
    vault: Optional[str] = None
    new_certs_principal_id: Optional[str] = None
    renew_certs_principal_id: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status == ProvisioningStatus.SKIPPED


def _log_failure(action: str, error: AzureError) -> None:
    if isinstance(error, ClientAuthenticationError):
        logger.error(f"❌ PERMISSION DENIED {action}: {error.message}")
    elif isinstance(error, HttpResponseError):
        logger.error(f"❌ Failed {action}: {error.status_code} - {error.message}")
    else:
        logger.error(f"❌ Azure error {action}: {type(error).__name__}: {error}")


# ==========================================
# Resource Group
# ==========================================

def resource_group_exists(clients: AzureClients, names: ResourceNames) -> bool:
    rg_name = names.resource_group()
    try:
        return clients.resource.resource_groups.check_existence(rg_name)
    except AzureError as e:
        _log_failure(f"checking resource group '{rg_name}'", e)
        raise


def create_resource_group(clients: AzureClients, config: ProvisioningConfig, names: ResourceNames) -> Any:
    """Create or update the resource group in the configured region."""
    rg_name = names.resource_group()
    try:
        resource_group = clients.resource.resource_groups.create_or_update(
            rg_name,
            {"location": config.region_name}
        )
    except AzureError as e:
        _log_failure(f"creating resource group '{rg_name}'", e)
        raise

    logger.info(
        f"✅ Successfully created or updated resource group '{resource_group.name}' "
        f"in region '{resource_group.location}'"
    )
    return resource_group


# ==========================================
# Storage Account & App Service Plan
# ==========================================

def create_storage_account(clients: AzureClients, config: ProvisioningConfig, names: ResourceNames) -> StorageAccount:
    """
    Create the Standard_LRS storage account shared by both function apps.

    Azure Functions keep their triggers, logs and (on the consumption plan)
    their content share in this account.
    """
    rg_name = names.resource_group()
    storage_name = names.storage_account()

    parameters = StorageAccountCreateParameters(
        sku=StorageSku(name="Standard_LRS"),
        kind="StorageV2",
        location=config.region_name,
        enable_https_traffic_only=True,
        minimum_tls_version="TLS1_2",
    )

    try:
        poller = clients.storage.storage_accounts.begin_create(
            resource_group_name=rg_name,
            account_name=storage_name,
            parameters=parameters
        )
        storage_account = poller.result()
    except AzureError as e:
        _log_failure(f"creating storage account '{storage_name}'", e)
        raise

    logger.info(f"✅ Successfully created or updated storage account '{storage_account.name}'")
    return storage_account


def get_storage_connection_string(clients: AzureClients, names: ResourceNames) -> str:
    rg_name = names.resource_group()
    storage_name = names.storage_account()
    try:
        keys = clients.storage.storage_accounts.list_keys(rg_name, storage_name)
    except AzureError as e:
        _log_failure(f"listing keys of storage account '{storage_name}'", e)
        raise

    account_key = keys.keys[0].value
    return (
        f"DefaultEndpointsProtocol=https;AccountName={storage_name};"
        f"AccountKey={account_key};EndpointSuffix=core.windows.net"
    )


def create_app_service_plan(clients: AzureClients, config: ProvisioningConfig, names: ResourceNames) -> AppServicePlan:
    """Create the Windows consumption (Y1 / Dynamic) plan hosting both function apps."""
    rg_name = names.resource_group()
    plan_name = names.app_service_plan()

    plan_params = AppServicePlan(
        location=config.region_name,
        kind="functionapp",
        reserved=False,  # Windows
        sku=SkuDescription(
            name="Y1",
            tier="Dynamic",
            size="Y1",
            family="Y",
            capacity=0
        ),
    )

    try:
        poller = clients.web.app_service_plans.begin_create_or_update(
            resource_group_name=rg_name,
            name=plan_name,
            app_service_plan=plan_params
        )
        plan = poller.result()
    except AzureError as e:
        _log_failure(f"creating app service plan '{plan_name}'", e)
        raise

    logger.info(f"✅ Successfully created or updated app service plan '{plan.name}'")
    return plan


# ==========================================
# Function Apps
# ==========================================

def create_function_app(
    clients: AzureClients,
    config: ProvisioningConfig,
    names: ResourceNames,
    app_name: str,
    plan: AppServicePlan,
    storage_connection_string: str,
    client_cert_enabled: bool = False
) -> Site:
    """
    Create or update a function app with a system-assigned managed identity.

    Args:
        clients: Management clients
        config: Provisioning configuration
        names: Resource names
        app_name: Function app name
        plan: App service plan the app runs on
        storage_connection_string: Connection string of the shared storage account
        client_cert_enabled: Require TLS client certificates on incoming requests

    Returns:
        Site: The function app; identity.principal_id is assigned by Azure
    """
    rg_name = names.resource_group()

    app_settings = [
        NameValuePair(name="AzureWebJobsStorage", value=storage_connection_string),
        NameValuePair(name="WEBSITE_CONTENTAZUREFILECONNECTIONSTRING", value=storage_connection_string),
        NameValuePair(name="WEBSITE_CONTENTSHARE", value=names.function_app_content_share(app_name)),
        NameValuePair(name="FUNCTIONS_EXTENSION_VERSION", value=FUNCTIONS_EXTENSION_VERSION),
        NameValuePair(name="FUNCTIONS_WORKER_RUNTIME", value=FUNCTIONS_WORKER_RUNTIME),
    ]

    site = Site(
        location=config.region_name,
        kind="functionapp",
        server_farm_id=plan.id,
        site_config=SiteConfig(app_settings=app_settings),
        identity=ManagedServiceIdentity(type="SystemAssigned"),
        client_cert_enabled=client_cert_enabled,
        https_only=True,
    )

    try:
        poller = clients.web.web_apps.begin_create_or_update(
            resource_group_name=rg_name,
            name=app_name,
            site_envelope=site
        )
        function_app = poller.result()
    except AzureError as e:
        _log_failure(f"creating function app '{app_name}'", e)
        raise

    if function_app.identity is None or not function_app.identity.principal_id:
        raise RuntimeError(f"Function app '{app_name}' was created without a managed identity principal id")

    return function_app


def create_function_apps(
    clients: AzureClients,
    config: ProvisioningConfig,
    names: ResourceNames,
    resource_group: Any
) -> Tuple[Site, Site]:
    """
    Create the storage account, the app service plan, and both certificate
    authority function apps.

    Returns:
        (new_certs, renew_certs) function apps
    """
    logger.info(f"Creating function apps in resource group '{resource_group.name}'")

    create_storage_account(clients, config, names)
    storage_connection_string = get_storage_connection_string(clients, names)
    plan = create_app_service_plan(clients, config, names)

    new_certs = create_function_app(
        clients, config, names,
        names.new_certs_function_app(),
        plan,
        storage_connection_string
    )
    logger.info(
        f"✅ Successfully created or updated function app '{new_certs.name}'. "
        "Note that user authentication is not setup from code and needs to be set manually."
    )

    renew_certs = create_function_app(
        clients, config, names,
        names.renew_certs_function_app(),
        plan,
        storage_connection_string,
        client_cert_enabled=True
    )
    logger.info(f"✅ Successfully created or updated function app '{renew_certs.name}'")

    return new_certs, renew_certs


# ==========================================
# Key Vault
# ==========================================

def create_vault(
    clients: AzureClients,
    config: ProvisioningConfig,
    names: ResourceNames,
    user_object_id: str,
    certificate_authority_principal_ids: Iterable[str]
) -> Vault:
    """
    Create or update the Key Vault holding the CA signing keys and certificates.

    The vault uses access policies (not Azure RBAC): the user gets full
    certificate permissions, each function app identity may sign and read
    certificates.
    """
    rg_name = names.resource_group()
    vault_name = names.vault()

    access_policies = build_access_policies(
        config.tenant_id,
        user_object_id,
        certificate_authority_principal_ids
    )

    parameters = VaultCreateOrUpdateParameters(
        location=config.region_name,
        properties=VaultProperties(
            tenant_id=config.tenant_id,
            sku=VaultSku(family="A", name="standard"),
            access_policies=access_policies,
            enable_rbac_authorization=False,
        ),
    )

    try:
        poller = clients.key_vault.vaults.begin_create_or_update(
            resource_group_name=rg_name,
            vault_name=vault_name,
            parameters=parameters
        )
        vault = poller.result()
    except AzureError as e:
        _log_failure(f"creating key vault '{vault_name}'", e)
        raise

    logger.info(f"✅ Successfully created or updated key vault '{vault.name}'")
    return vault


# ==========================================
# Provisioning Routine
# ==========================================

def provision(
    config: ProvisioningConfig,
    credential: AcquireTokenResult,
    force_recreate: bool = False,
    clients: Optional[AzureClients] = None
) -> ProvisioningResult:
    """
    Provision all Azure resources of the PKI sample.

    Args:
        config: Validated provisioning configuration
        credential: Management token and the invoking user's object id
        force_recreate: Create or update resources even when the resource group exists
        clients: Management clients; built from the credential when omitted

    Returns:
        ProvisioningResult: SKIPPED when the resource group exists and
        force_recreate is False, CREATED otherwise

    Raises:
        AzureError: Whatever the management API raises; later steps are not attempted
    """
    names = ResourceNames(config.resource_name_prefix)

    if clients is None:
        with AzureClients.create(credential.as_token_credential(), config.subscription_id) as owned_clients:
            return _provision(owned_clients, config, credential, names, force_recreate)
    return _provision(clients, config, credential, names, force_recreate)


def _provision(
    clients: AzureClients,
    config: ProvisioningConfig,
    credential: AcquireTokenResult,
    names: ResourceNames,
    force_recreate: bool
) -> ProvisioningResult:
    rg_name = names.resource_group()

    if not force_recreate and resource_group_exists(clients, names):
        logger.info(f"⏭️ Resource group '{rg_name}' already exists. Skipping resource creation.")
        return ProvisioningResult(status=ProvisioningStatus.SKIPPED, resource_group=rg_name)

    logger.info(f"🚀 Provisioning PKI resources in subscription {config.subscription_id} ({config.region_name})")

    resource_group = create_resource_group(clients, config, names)
    new_certs, renew_certs = create_function_apps(clients, config, names, resource_group)
    vault = create_vault(
        clients, config, names,
        credential.user_object_id,
        [new_certs.identity.principal_id, renew_certs.identity.principal_id]
    )

    return ProvisioningResult(
        status=ProvisioningStatus.CREATED,
        resource_group=rg_name,
        storage_account=names.storage_account(),
        app_service_plan=names.app_service_plan(),
        new_certs_function_app=new_certs.name,
        renew_certs_function_app=renew_certs.name,
        vault=vault.name,
        new_certs_principal_id=new_certs.identity.principal_id,
        renew_certs_principal_id=renew_certs.identity.principal_id,
    )

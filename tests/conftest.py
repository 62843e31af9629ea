import os
import sys

import jwt
import pytest
from unittest.mock import MagicMock

# Make the package importable without installing it
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

SUBSCRIPTION_ID = "11111111-2222-3333-4444-555555555555"
TENANT_ID = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
USER_OBJECT_ID = "99999999-8888-7777-6666-555555555555"


def make_jwt(claims: dict) -> str:
    """Build an unsigned JWT carrying the given claims."""
    return jwt.encode(claims, key=None, algorithm="none")


@pytest.fixture(autouse=True)
def clear_azure_env(monkeypatch):
    """Keep the developer's Azure environment out of the tests."""
    for var in ("AZURE_SUBSCRIPTION_ID", "AZURE_TENANT_ID", "AZURE_REGION", "RESOURCE_NAME_PREFIX"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def demo_config():
    from pki_setup.config import ProvisioningConfig

    return ProvisioningConfig(
        subscription_id=SUBSCRIPTION_ID,
        tenant_id=TENANT_ID,
        region_name="westus",
        resource_name_prefix="Demo",
    )


@pytest.fixture
def demo_credential():
    from pki_setup.credentials import AcquireTokenResult

    return AcquireTokenResult(
        access_token=make_jwt({"oid": USER_OBJECT_ID}),
        user_object_id=USER_OBJECT_ID,
        expires_on=4102444800,
    )


def _poller(result):
    poller = MagicMock()
    poller.result.return_value = result
    return poller


@pytest.fixture
def mock_clients():
    """
    AzureClients stand-in whose create calls echo back the requested names.

    Function apps get the principal id '<app name>-principal'.
    """
    clients = MagicMock()

    clients.resource.resource_groups.check_existence.return_value = False

    def create_resource_group(name, parameters):
        group = MagicMock()
        group.name = name
        group.location = parameters["location"]
        return group

    clients.resource.resource_groups.create_or_update.side_effect = create_resource_group

    def create_storage_account(resource_group_name, account_name, parameters):
        account = MagicMock()
        account.name = account_name
        return _poller(account)

    clients.storage.storage_accounts.begin_create.side_effect = create_storage_account
    storage_key = MagicMock()
    storage_key.value = "c3RvcmFnZS1rZXk="
    clients.storage.storage_accounts.list_keys.return_value.keys = [storage_key]

    def create_plan(resource_group_name, name, app_service_plan):
        plan = MagicMock()
        plan.name = name
        plan.id = (
            f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group_name}"
            f"/providers/Microsoft.Web/serverfarms/{name}"
        )
        return _poller(plan)

    clients.web.app_service_plans.begin_create_or_update.side_effect = create_plan

    def create_function_app(resource_group_name, name, site_envelope):
        app = MagicMock()
        app.name = name
        app.identity.principal_id = f"{name}-principal"
        return _poller(app)

    clients.web.web_apps.begin_create_or_update.side_effect = create_function_app

    def create_vault(resource_group_name, vault_name, parameters):
        vault = MagicMock()
        vault.name = vault_name
        vault.properties = parameters.properties
        return _poller(vault)

    clients.key_vault.vaults.begin_create_or_update.side_effect = create_vault

    return clients

"""
Prefect flow for provisioning the PKI sample resources

Flow parameters are stored with every flow run, so the flow only takes the
configuration and signs in itself; the bearer token never becomes a parameter.
"""
from prefect import flow, get_run_logger

from .config import ProvisioningConfig
from .credentials import acquire_token
from .resource_management import ProvisioningResult, provision


@flow(name="Provision PKI Resources")
def provision_pki_resources(
    config: ProvisioningConfig,
    force_recreate: bool = False
) -> ProvisioningResult:
    """
    Sign in to the configured tenant and run the provisioning routine.

    Failures are re-raised so the flow run ends in a Failed state.
    """
    logger = get_run_logger()
    logger.info(f"🚀 Provisioning PKI resources with prefix '{config.resource_name_prefix}'")

    try:
        credential = acquire_token(config.tenant_id)
        result = provision(config, credential, force_recreate=force_recreate)
    except Exception as e:
        logger.error(f"❌ Provisioning failed: {e}")
        raise

    if result.skipped:
        logger.info(f"⏭️ Resource group '{result.resource_group}' already exists, nothing provisioned")
    else:
        logger.info(f"✅ PKI resources ready, key vault '{result.vault}'")
    return result

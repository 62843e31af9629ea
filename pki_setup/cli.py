"""
pki-setup: create the Azure resources for the build PKI sample.

Usage:
    pki-setup [--force-recreate] [--subscription-id ID] [--tenant-id ID]
              [--region REGION] [--prefix PREFIX] [--verbose]

Every option except --force-recreate falls back to its environment variable
(AZURE_SUBSCRIPTION_ID, AZURE_TENANT_ID, AZURE_REGION, RESOURCE_NAME_PREFIX).
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from azure.core.exceptions import AzureError

from . import config as config_module
from .config import ProvisioningConfig
from .credentials import acquire_token
from .resource_management import provision

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pki-setup",
        description="Create the Azure resource group, function apps and key vault for the build PKI sample."
    )
    parser.add_argument(
        "--force-recreate",
        action="store_true",
        help="Create or update resources even if the resource group already exists"
    )
    parser.add_argument(
        "--subscription-id",
        help=f"Azure subscription id (default: ${config_module.SUBSCRIPTION_ID_VAR})"
    )
    parser.add_argument(
        "--tenant-id",
        help=f"Azure AD tenant id (default: ${config_module.TENANT_ID_VAR})"
    )
    parser.add_argument(
        "--region",
        help=f"Azure region, e.g. westus (default: ${config_module.REGION_VAR})"
    )
    parser.add_argument(
        "--prefix",
        help=f"Resource name prefix (default: ${config_module.RESOURCE_NAME_PREFIX_VAR})"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def load_config(args: argparse.Namespace) -> ProvisioningConfig:
    """Options given on the command line override their environment variables."""
    overrides = {
        config_module.SUBSCRIPTION_ID_VAR: args.subscription_id,
        config_module.TENANT_ID_VAR: args.tenant_id,
        config_module.REGION_VAR: args.region,
        config_module.RESOURCE_NAME_PREFIX_VAR: args.prefix,
    }
    environ = dict(os.environ)
    environ.update({name: value for name, value in overrides.items() if value is not None})
    return ProvisioningConfig.from_env(environ)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    # Azure SDK HTTP logging is very chatty at INFO
    logging.getLogger("azure").setLevel(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = load_config(args)
    except ValueError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    try:
        credential = acquire_token(config.tenant_id)
        result = provision(config, credential, force_recreate=args.force_recreate)
    except (AzureError, ValueError, RuntimeError) as e:
        logger.error(f"💥 Setup failed: {e}")
        return EXIT_FAILURE

    if result.skipped:
        logger.info("Nothing to do. Run with --force-recreate to update the existing resources.")
    else:
        logger.info(f"✅ Setup complete. Key vault: {result.vault}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

"""
CLI command handlers.

This module contains the command handlers for the tessera CLI.
"""

import logging
from pathlib import Path

from bevy import get_registry

from tessera.auth.config.loader import AuthConfigLoader
from tessera.auth.exceptions import ConfigurationError, ProviderError
from tessera.auth.factory import AuthSystemBootstrap
from tessera.auth.utils import generate_secret_key

logger = logging.getLogger("tessera")


def handle_config_validate_command(args_ns):
    """Handles the 'config validate' command."""
    logger.debug("Config validate command started.")

    config_path = Path(args_ns.file) if args_ns.file else AuthConfigLoader.get_default_config_path()

    try:
        config = AuthConfigLoader.load_auth_config(config_path)
        print("✅ Auth configuration is valid")

        bootstrap = AuthSystemBootstrap(config)
        bootstrap.setup(get_registry().create_container())
        print("✅ All components could be created")

    except (ConfigurationError, ProviderError) as e:
        print(f"❌ {e.message}")
        return False

    for component, spec in bootstrap.get_provider_info().items():
        print(f"   {component}: {spec}")
    print(f"   roles: {', '.join(config.roles) if config.roles else 'any'}")
    print("🎉 Configuration validation passed!")
    return True


def handle_secret_generate_command(args_ns):
    """Handles the 'secret generate' command."""
    if args_ns.length < 24:
        print("❌ Secret length must be at least 24 bytes")
        return False

    print(generate_secret_key(args_ns.length))
    return True

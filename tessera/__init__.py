"""tessera: role-agnostic actor authentication and bearer-session lifecycle."""

from tessera.auth import AuthFacade, RoleAdapter, create_auth_system

__version__ = "0.1.0"

__all__ = ["AuthFacade", "RoleAdapter", "create_auth_system", "__version__"]

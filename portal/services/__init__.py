from portal.services.auth import authenticate, register_user, require_credentials

__all__ = ["authenticate", "register_user", "require_credentials"]

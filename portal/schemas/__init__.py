from portal.schemas.credentials import Credentials

__all__ = ["Credentials"]

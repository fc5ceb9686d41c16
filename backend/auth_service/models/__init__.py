from auth_service.models.user import User

__all__ = ["User"]

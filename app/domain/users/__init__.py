# Users domain module
from app.domain.users.models import User

__all__ = ["User"]

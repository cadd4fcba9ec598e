from cmdb.models.refresh_token import RefreshToken
from cmdb.models.role import Role
from cmdb.models.user import User

__all__ = [
    "RefreshToken",
    "Role",
    "User",
]

from storerate.models.rating import Rating
from storerate.models.refresh_token import RefreshToken
from storerate.models.store import Store
from storerate.models.user import Role, User

__all__ = [
    "Rating",
    "RefreshToken",
    "Role",
    "Store",
    "User",
]

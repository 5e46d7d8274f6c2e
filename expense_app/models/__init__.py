from expense_app.models.platform import Platform
from expense_app.models.user import User

__all__ = [
    "Platform",
    "User"
]

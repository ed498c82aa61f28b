"""
Accounts domain: admin users, login and tokens.
"""

from .repository import UserRepository  # noqa: F401
from .service import AuthService, seed_default_admin  # noqa: F401

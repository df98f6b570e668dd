"""Account domain exports"""

from .exceptions import AccountAlreadyExistsError, AccountError
from .models import ADMIN_ROLE, USER_ROLE, Account, AccountCreateInput
from .service import AccountService

__all__ = [
    "ADMIN_ROLE",
    "USER_ROLE",
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountService",
]

"""Account persistence package."""

from auth_api.services.accounts.account_store import (
    AccountStore,
    DuplicateEmailError,
    account_store,
    normalize_email,
)

__all__ = [
    "AccountStore",
    "DuplicateEmailError",
    "account_store",
    "normalize_email",
]

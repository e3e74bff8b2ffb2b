"""
Account Service Module

Keeps the viewer account slots in the configuration.
"""

from typing import List, Optional, Sequence, TYPE_CHECKING
import logging

from models.account import Account

if TYPE_CHECKING:
    from app.protocols import IConfigService

logger = logging.getLogger(__name__)


class AccountService:
    """
    Account Service

    There are always exactly ACCOUNT_SLOTS slots; missing or malformed stored
    slots come back empty.
    """

    ACCOUNT_SLOTS = 3
    CONFIG_KEY = "accounts"

    def __init__(self, config: "IConfigService"):
        self._config = config

    def get_accounts(self) -> List[Account]:
        stored = self._config.get(self.CONFIG_KEY, []) or []
        if not isinstance(stored, list):
            logger.error("Failed to parse saved accounts, resetting.")
            stored = []

        accounts = []
        for index in range(self.ACCOUNT_SLOTS):
            data = stored[index] if index < len(stored) else {}
            accounts.append(Account.from_dict(data) if isinstance(data, dict) else Account())
        return accounts

    def save_accounts(self, accounts: Sequence[Account]) -> bool:
        slots = list(accounts)[: self.ACCOUNT_SLOTS]
        slots += [Account() for _ in range(self.ACCOUNT_SLOTS - len(slots))]
        self._config.set(self.CONFIG_KEY, [
            Account(email=a.email.strip(), enabled=a.enabled).to_dict() for a in slots
        ])
        return self._config.save()

    def active_account(self) -> Optional[Account]:
        """First enabled account with an email"""
        return next((a for a in self.get_accounts() if a.is_active), None)

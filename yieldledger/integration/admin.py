"""
Admin identity and pause switch.

A minimal governance collaborator: one admin account gates strategy
management, reward-pool funding and the pause flag.
"""

from __future__ import annotations

import logging

from ..core.errors import UnauthorizedError, ValidationError
from ..state.ledger import ZERO_ACCOUNT, Account

logger = logging.getLogger(__name__)


class AdminRegistry:
    def __init__(self, admin: Account, *, paused: bool = False) -> None:
        _require_admin_id(admin)
        self._admin = admin
        self._paused = bool(paused)

    @property
    def admin(self) -> Account:
        return self._admin

    def is_authorized(self, caller: Account) -> bool:
        return caller == self._admin

    def is_paused(self) -> bool:
        return self._paused

    def set_paused(self, caller: Account, paused: bool) -> bool:
        if not self.is_authorized(caller):
            raise UnauthorizedError(f"{caller!r} may not change the pause flag")
        self._paused = bool(paused)
        logger.info("pause flag set to %s by %s", self._paused, caller)
        return self._paused

    def transfer_admin(self, caller: Account, new_admin: Account) -> None:
        if not self.is_authorized(caller):
            raise UnauthorizedError(f"{caller!r} may not transfer admin rights")
        _require_admin_id(new_admin)
        logger.info("admin transferred from %s to %s", self._admin, new_admin)
        self._admin = new_admin

    def snapshot(self) -> tuple[Account, bool]:
        return self._admin, self._paused

    def restore(self, snapshot: tuple[Account, bool]) -> None:
        self._admin, self._paused = snapshot


def _require_admin_id(account: Account) -> None:
    if not isinstance(account, str) or not account or account == ZERO_ACCOUNT:
        raise ValidationError(f"invalid admin account: {account!r}")

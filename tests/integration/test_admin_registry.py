"""Tests for yieldledger/integration/admin.py and ports.ManualClock."""

import pytest

from yieldledger.core.errors import UnauthorizedError, ValidationError
from yieldledger.integration.admin import AdminRegistry
from yieldledger.integration.ports import BlockClock, Governance, ManualClock, Transactional
from yieldledger.state.ledger import ZERO_ACCOUNT


class TestAdminRegistry:
    def test_satisfies_ports(self):
        reg = AdminRegistry("admin")
        assert isinstance(reg, Governance)
        assert isinstance(reg, Transactional)

    def test_pause_requires_admin(self):
        reg = AdminRegistry("admin")
        with pytest.raises(UnauthorizedError):
            reg.set_paused("alice", True)
        assert reg.set_paused("admin", True) is True
        assert reg.is_paused()

    def test_transfer_admin(self):
        reg = AdminRegistry("admin")
        reg.transfer_admin("admin", "ops")
        assert reg.admin == "ops"
        assert not reg.is_authorized("admin")

    @pytest.mark.parametrize("bad", ["", ZERO_ACCOUNT])
    def test_invalid_admin_rejected(self, bad):
        with pytest.raises(ValidationError):
            AdminRegistry(bad)
        reg = AdminRegistry("admin")
        with pytest.raises(ValidationError):
            reg.transfer_admin("admin", bad)
        assert reg.admin == "admin"

    def test_snapshot_restore(self):
        reg = AdminRegistry("admin")
        snap = reg.snapshot()
        reg.set_paused("admin", True)
        reg.transfer_admin("admin", "ops")
        reg.restore(snap)
        assert reg.admin == "admin"
        assert not reg.is_paused()


class TestManualClock:
    def test_advance(self):
        clock = ManualClock(5)
        assert isinstance(clock, BlockClock)
        assert clock.advance(10) == 15
        assert clock.current_tick() == 15

    def test_monotonic(self):
        clock = ManualClock(5)
        with pytest.raises(ValueError):
            clock.set_tick(4)
        with pytest.raises(ValueError):
            clock.advance(-1)
        clock.set_tick(9)
        assert clock.current_tick() == 9

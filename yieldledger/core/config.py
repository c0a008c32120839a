"""
Engine parameters and YAML loading.

Parameters are frozen dataclasses validated on construction. The imperative
shell loads them once and passes them explicitly into every core call.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .math import BPS_SCALE


def _check_int_fields(obj: Any, names: tuple[str, ...]) -> None:
    for name in names:
        v = getattr(obj, name)
        if not isinstance(v, int) or isinstance(v, bool):
            raise TypeError(f"{name} must be an int")
        if v < 0:
            raise ValueError(f"{name} must be non-negative: {v}")


def _check_account(name: str, v: Any) -> None:
    if not isinstance(v, str) or not v:
        raise ValueError(f"{name} must be a non-empty string")


@dataclass(frozen=True)
class VaultParams:
    min_deposit: int = 1_000_000
    max_deposit_per_account: int = 1_000_000_000_000
    custody_account: str = "vault-custody"

    def __post_init__(self) -> None:
        _check_int_fields(self, ("min_deposit", "max_deposit_per_account"))
        _check_account("custody_account", self.custody_account)
        if self.max_deposit_per_account <= self.min_deposit:
            raise ValueError("max_deposit_per_account must exceed min_deposit")


@dataclass(frozen=True)
class StakingParams:
    min_stake_amount: int = 1_000_000
    min_stake_duration: int = 144
    reward_rate: int = 100  # percent per tick, scaled by 100
    penalty_rate_bps: int = 2_000
    custody_account: str = "staking-custody"

    def __post_init__(self) -> None:
        _check_int_fields(
            self,
            ("min_stake_amount", "min_stake_duration", "reward_rate", "penalty_rate_bps"),
        )
        _check_account("custody_account", self.custody_account)
        if self.penalty_rate_bps > BPS_SCALE:
            raise ValueError(f"penalty_rate_bps must be in [0, {BPS_SCALE}]: {self.penalty_rate_bps}")


@dataclass(frozen=True)
class LedgerConfig:
    vault: VaultParams = field(default_factory=VaultParams)
    staking: StakingParams = field(default_factory=StakingParams)

    def __post_init__(self) -> None:
        if self.vault.custody_account == self.staking.custody_account:
            raise ValueError("vault and staking custody accounts must differ")


def _params_from_mapping(cls: type, obj: Any, section: str):
    if obj is None:
        return cls()
    if not isinstance(obj, Mapping):
        raise TypeError(f"{section} config must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise ValueError(f"unknown {section} config keys: {', '.join(map(str, unknown))}")
    return cls(**dict(obj))


def config_from_mapping(obj: Mapping[str, Any] | None) -> LedgerConfig:
    """Build a ``LedgerConfig``; missing keys take their defaults, unknown keys are rejected."""
    if obj is None:
        return LedgerConfig()
    if not isinstance(obj, Mapping):
        raise TypeError("config must be a mapping")
    unknown = sorted(set(obj) - {"vault", "staking"})
    if unknown:
        raise ValueError(f"unknown config sections: {', '.join(map(str, unknown))}")
    return LedgerConfig(
        vault=_params_from_mapping(VaultParams, obj.get("vault"), "vault"),
        staking=_params_from_mapping(StakingParams, obj.get("staking"), "staking"),
    )


def load_config(path: str | Path) -> LedgerConfig:
    """Load a ``LedgerConfig`` from a YAML file."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return config_from_mapping(obj)

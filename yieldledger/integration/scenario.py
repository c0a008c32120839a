#!/usr/bin/env python3
"""
Scenario replay (imperative shell).

Builds a complete in-memory host (clock, token ledger, admin registry, both
engines and the aggregator) from a YAML scenario, replays each step, and
reports per-step outcomes plus the final ledger state as JSON.

Scenario shape::

    config: {vault: {...}, staking: {...}}   # optional, see core.config
    admin: admin
    start_tick: 1000
    mint: {alice: 20000000}
    steps:
      - {op: add_strategy, caller: admin, strategy: s1, apy: 500, risk_score: 10}
      - {op: deposit, caller: alice, amount: 10000000, strategy: s1, expect: ok}
      - {op: advance, ticks: 200}
      - {op: unstake, caller: alice, expect: not_staked}

``expect`` is ``ok`` or an ``ErrorKind`` value; steps without it always match.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import yaml

from ..core.config import LedgerConfig, config_from_mapping
from ..core.errors import ErrorKind, LedgerError, OpResult, capture
from ..core.serialize import staking_state_to_dict, vault_state_to_dict
from ..state.token_ledger import DEFAULT_MAX_SUPPLY, TokenLedger
from .admin import AdminRegistry
from .aggregator import YieldAggregator
from .ports import ManualClock
from .staking_engine import StakeRewardEngine
from .vault_engine import ShareVaultEngine

logger = logging.getLogger(__name__)


@dataclass
class LedgerHost:
    """All collaborators of one in-memory deployment."""

    config: LedgerConfig
    clock: ManualClock
    token: TokenLedger
    admin: AdminRegistry
    vault: ShareVaultEngine
    staking: StakeRewardEngine
    aggregator: YieldAggregator


def build_host(
    config: LedgerConfig | None = None,
    *,
    admin: str = "admin",
    start_tick: int = 0,
    max_supply: int = DEFAULT_MAX_SUPPLY,
) -> LedgerHost:
    config = config if config is not None else LedgerConfig()
    clock = ManualClock(start_tick)
    token = TokenLedger(max_supply=max_supply)
    registry = AdminRegistry(admin)
    vault = ShareVaultEngine(token, clock, registry, config.vault)
    staking = StakeRewardEngine(token, clock, registry, config.staking)
    aggregator = YieldAggregator(vault, staking, token, registry)
    return LedgerHost(
        config=config,
        clock=clock,
        token=token,
        admin=registry,
        vault=vault,
        staking=staking,
        aggregator=aggregator,
    )


# ---------------------------------------------------------------------------
# Step dispatch
# ---------------------------------------------------------------------------

StepFn = Callable[[LedgerHost, Mapping[str, Any]], Any]

_STEPS: Dict[str, StepFn] = {
    "advance": lambda h, s: h.clock.advance(int(s.get("ticks", 1))),
    "set_tick": lambda h, s: h.clock.set_tick(s["tick"]),
    "mint": lambda h, s: h.token.mint(s["account"], s["amount"]),
    "set_paused": lambda h, s: h.admin.set_paused(s["caller"], bool(s["paused"])),
    "transfer_admin": lambda h, s: h.admin.transfer_admin(s["caller"], s["new_admin"]),
    "add_strategy": lambda h, s: h.vault.add_strategy(
        s["caller"], s["strategy"], s.get("apy", 0), s.get("risk_score", 0),
    ),
    "deactivate_strategy": lambda h, s: h.vault.deactivate_strategy(s["caller"], s["strategy"]),
    "deposit": lambda h, s: h.vault.deposit(s["caller"], s["amount"], s["strategy"]),
    "withdraw": lambda h, s: h.vault.withdraw(s["caller"], s["amount"], s["strategy"]),
    "stake": lambda h, s: h.staking.stake(s["caller"], s["amount"], s["duration"]),
    "unstake": lambda h, s: h.staking.unstake(s["caller"]),
    "claim_rewards": lambda h, s: h.staking.claim_rewards(s["caller"]),
    "fund_reward_pool": lambda h, s: h.staking.fund_reward_pool(s["caller"], s["amount"]),
    "deposit_and_stake": lambda h, s: h.aggregator.deposit_and_stake(
        s["caller"], s["amount"], s["strategy"], s["duration"],
    ),
    "withdraw_and_claim": lambda h, s: h.aggregator.withdraw_and_claim(
        s["caller"], s["amount"], s["strategy"],
    ),
    "record_yield": lambda h, s: h.aggregator.record_yield(s["caller"], s["strategy"], s["amount"]),
}

_EXPECT_VALUES = {"ok"} | {kind.value for kind in ErrorKind}


def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def _result_to_dict(index: int, op: str, result: OpResult[Any], expect: Optional[str]) -> Dict[str, Any]:
    outcome = "ok" if result.ok else result.error.value  # type: ignore[union-attr]
    row: Dict[str, Any] = {"index": index, "op": op, "ok": result.ok}
    if result.ok:
        row["value"] = _jsonable(result.value)
    else:
        row["error"] = outcome
        row["message"] = result.message
    if expect is not None:
        row["expect"] = expect
        row["matched"] = outcome == expect
    return row


def run_scenario(doc: Mapping[str, Any]) -> Dict[str, Any]:
    """Replay a parsed scenario document and return the report dict.

    Raises:
        ValueError: malformed scenario (unknown op, missing field, bad expect).
    """
    if not isinstance(doc, Mapping):
        raise ValueError("scenario must be a mapping")
    host = build_host(
        config_from_mapping(doc.get("config")),
        admin=doc.get("admin", "admin"),
        start_tick=int(doc.get("start_tick", 0)),
        max_supply=int(doc.get("max_supply", DEFAULT_MAX_SUPPLY)),
    )
    for account, amount in sorted((doc.get("mint") or {}).items()):
        host.token.mint(account, amount)

    rows: List[Dict[str, Any]] = []
    for index, step in enumerate(doc.get("steps") or []):
        if not isinstance(step, Mapping) or "op" not in step:
            raise ValueError(f"step {index}: must be a mapping with an 'op' key")
        op = step["op"]
        fn = _STEPS.get(op)
        if fn is None:
            raise ValueError(f"step {index}: unknown op {op!r}")
        expect = step.get("expect")
        if expect is not None and expect not in _EXPECT_VALUES:
            raise ValueError(f"step {index}: unknown expect {expect!r}")
        try:
            result = capture(fn, host, step)
        except KeyError as exc:
            raise ValueError(f"step {index} ({op}): missing field {exc}") from exc
        row = _result_to_dict(index, op, result, expect)
        logger.debug("step %d %s -> %s", index, op, row.get("error", "ok"))
        rows.append(row)

    return {
        "tick": host.clock.current_tick(),
        "steps": rows,
        "all_matched": all(r.get("matched", True) for r in rows),
        "vault": vault_state_to_dict(host.vault.state),
        "staking": staking_state_to_dict(host.staking.state),
        "yields": {
            sid: dataclasses.asdict(y) for sid, y in sorted(host.aggregator.strategy_yields().items())
        },
        "total_yield": host.aggregator.total_yield,
        "balances": dict(sorted(host.token.get_all_balances().items())),
        "total_supply": host.token.total_supply(),
    }


def load_scenario(path: str | Path) -> Mapping[str, Any]:
    doc = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(doc, Mapping):
        raise ValueError(f"{path}: scenario must be a mapping")
    return doc


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Replay a yieldledger YAML scenario")
    p.add_argument("scenario", help="Path to scenario YAML")
    p.add_argument("--json-out", default="", help="Also write the JSON report to this path")
    p.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    args = p.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        report = run_scenario(load_scenario(args.scenario))
    except (OSError, ValueError, TypeError, LedgerError, yaml.YAMLError) as exc:
        print(f"[replay] FAIL: {exc}", file=sys.stderr)
        return 2

    text = json.dumps(report, indent=2, sort_keys=True)
    print(text)
    if args.json_out:
        Path(args.json_out).write_text(text + "\n", encoding="utf-8")
    return 0 if report["all_matched"] else 1


if __name__ == "__main__":
    raise SystemExit(main())

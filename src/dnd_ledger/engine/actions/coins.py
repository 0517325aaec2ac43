"""Coin purse changes.

Each call carries a signed delta per denomination. With change-making on,
a cost in one denomination may be paid by breaking larger coins: each
negative denomination borrows from the nearest larger denomination that
still has coins, and if that is not enough the smaller denominations are
pooled and recounted from the largest coin down.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from dnd_ledger.core.config import get_settings
from dnd_ledger.core.constants import COIN_NAMES, COIN_VALUES, GENERAL_ERROR_KEY
from dnd_ledger.engine.forms import (
    ActionComplete,
    ActionForm,
    ActionInput,
    ActionResult,
    OptionalInt,
    checkbox,
)
from dnd_ledger.models.records import CoinRecord
from dnd_ledger.models.snapshot import CharacterSnapshot
from dnd_ledger.storage.ledger import Ledger


# Smallest first
_ASCENDING = sorted(COIN_VALUES, key=COIN_VALUES.__getitem__)


def _optional_checkbox(value: Any) -> bool | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return checkbox(value)


class UpdateCoinsInput(ActionInput):
    pp: OptionalInt = Field(default=None, description="Platinum pieces to add (negative to spend)")
    gp: OptionalInt = Field(default=None, description="Gold pieces to add (negative to spend)")
    ep: OptionalInt = Field(default=None, description="Electrum pieces to add (negative to spend)")
    sp: OptionalInt = Field(default=None, description="Silver pieces to add (negative to spend)")
    cp: OptionalInt = Field(default=None, description="Copper pieces to add (negative to spend)")
    make_change: Annotated[bool | None, BeforeValidator(_optional_checkbox)] = Field(
        default=None, description="Break larger coins to cover a cost"
    )

    def deltas(self) -> dict[str, int]:
        return {coin: getattr(self, coin) or 0 for coin in COIN_VALUES}


def make_change(purse: dict[str, int]) -> dict[str, int]:
    """Cover negative denominations by breaking larger coins.

    The purse must have a non-negative total value. Denominations are
    settled smallest first; each negative one borrows from the nearest
    larger denomination holding coins. Anything still negative after that
    is fixed by recounting the value of every denomination up to the
    largest negative one, largest coin first (electrum is skipped when
    recounting).

    Args:
        purse: Coin counts, possibly negative.

    Returns:
        A new purse with the same total value and no negative counts.
    """
    coins = dict(purse)
    for index, coin in enumerate(_ASCENDING):
        if coins[coin] >= 0:
            continue
        for larger in _ASCENDING[index + 1 :]:
            if coins[larger] <= 0:
                continue
            ratio = COIN_VALUES[larger] // COIN_VALUES[coin]
            needed = (ratio - 1 - coins[coin]) // ratio
            broken = min(needed, coins[larger])
            coins[larger] -= broken
            coins[coin] += broken * ratio
            if coins[coin] >= 0:
                break

    negatives = [coin for coin in _ASCENDING if coins[coin] < 0]
    if not negatives:
        return coins

    ceiling = max(COIN_VALUES[coin] for coin in negatives)
    pooled = [coin for coin in _ASCENDING if COIN_VALUES[coin] <= ceiling]
    value = sum(coins[coin] * COIN_VALUES[coin] for coin in pooled)
    for coin in reversed(pooled):
        if coin == "ep":
            coins[coin] = 0
            continue
        coins[coin], value = divmod(value, COIN_VALUES[coin])
    return coins


def _describe(deltas: Mapping[str, int]) -> str:
    parts = [f"{abs(amount)} {COIN_NAMES[coin]}" for coin, amount in deltas.items() if amount]
    return ", ".join(parts)


def update_coins(ledger: Ledger, snapshot: CharacterSnapshot, data: Mapping[str, Any]) -> ActionResult:
    """Apply coin deltas and record the resulting purse."""
    form = ActionForm(UpdateCoinsInput, data)
    values = form.values
    if values is None:
        return form.incomplete()

    deltas = values.deltas()
    change_making = (
        values.make_change
        if values.make_change is not None
        else get_settings().rules.coin_change_making
    )
    current = snapshot.coins.model_dump(include=set(COIN_VALUES))
    purse = {coin: current[coin] + deltas[coin] for coin in COIN_VALUES}

    if not any(deltas.values()):
        if not form.is_check:
            form.error(GENERAL_ERROR_KEY, "Must change at least one coin value")
    elif change_making:
        have = snapshot.coins.total_copper
        need = -sum(amount * COIN_VALUES[coin] for coin, amount in deltas.items())
        if need > have:
            form.error(
                GENERAL_ERROR_KEY,
                f"Insufficient funds: need {need}cp but only have {have}cp total",
            )
        else:
            purse = make_change(purse)
    else:
        for coin, amount in purse.items():
            if amount < 0:
                form.error(coin, f"Insufficient {coin}: would result in {amount}")

    if form.halted:
        return form.incomplete()

    final = form.finalize()
    if final is None:
        return form.incomplete()

    with ledger.transaction():
        ledger.append(CoinRecord(character_id=snapshot.id, note=final.note, **purse))

    return ActionComplete(
        result={
            "note": _describe(deltas),
            "coins": purse,
            "change_made": purse != {c: current[c] + deltas[c] for c in COIN_VALUES},
        }
    )


__all__ = ["UpdateCoinsInput", "make_change", "update_coins"]

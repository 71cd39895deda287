"""
Execute / query message parsing for the staking pool.

Execute messages (one top-level key):
  {"stake":    {"amount": {"denom": "orai", "amount": "100"}}}
  {"withdraw": {"amount": {"denom": "orai", "amount": "50"}}}
  {"claim":    {}}

Query messages:
  {"config": {}}
  {"participant": {"address": "alice"}}

Amounts may be JSON ints or decimal strings (128-bit amounts do not survive
every JSON decoder as numbers).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from ..core.staking import MAX_AMOUNT, Action, InvalidAmount


_ADDRESS_RE = re.compile(r"^[0-9A-Za-z_.:\-]{1,128}$")
_DIGITS_RE = re.compile(r"^[0-9]{1,40}$")


class InvalidMessage(ValueError):
    """Message shape is not one this pool understands."""


class DenomMismatch(InvalidMessage):
    def __init__(self, got: str, expected: str) -> None:
        self.got = got
        self.expected = expected
        super().__init__(f"denom mismatch: got {got!r}, pool uses {expected!r}")


class InvalidIdentity(InvalidMessage):
    """Raw address could not be turned into a canonical participant key."""


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: int


@dataclass(frozen=True)
class ExecuteRequest:
    action: Action
    amount: Optional[Coin] = None


@dataclass(frozen=True)
class ConfigQuery:
    pass


@dataclass(frozen=True)
class ParticipantQuery:
    address: str


QueryRequest = Union[ConfigQuery, ParticipantQuery]


def validate_address(raw: Any) -> str:
    """Canonical participant key for a raw address string (trimmed, lower-case)."""
    if not isinstance(raw, str):
        raise InvalidIdentity("address must be a string")
    s = raw.strip()
    if not _ADDRESS_RE.fullmatch(s):
        raise InvalidIdentity(f"invalid address: {raw!r}")
    return s.lower()


def _require_object(value: Any, *, name: str) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidMessage(f"{name} must be an object")
    for k in value.keys():
        if not isinstance(k, str):
            raise InvalidMessage(f"{name} keys must be strings")
    return dict(value)


def _single_entry(message: Any, *, name: str) -> tuple[str, Dict[str, Any]]:
    obj = _require_object(message, name=name)
    if len(obj) != 1:
        raise InvalidMessage(f"{name} must have exactly one top-level key, got {sorted(obj)}")
    (tag, body), = obj.items()
    return tag, _require_object(body if body is not None else {}, name=f"{name}.{tag}")


def parse_amount(value: Any, *, name: str = "amount") -> int:
    """Parse an int or decimal-string amount. Malformed input is `InvalidAmount`."""
    if isinstance(value, bool):
        raise InvalidAmount(f"{name} must be an int or decimal string")
    if isinstance(value, int):
        amount = int(value)
    elif isinstance(value, str) and _DIGITS_RE.fullmatch(value.strip()):
        amount = int(value.strip())
    else:
        raise InvalidAmount(f"{name} must be an int or decimal string, got {value!r}")
    if amount > MAX_AMOUNT:
        raise InvalidAmount(f"{name} exceeds {MAX_AMOUNT}")
    return amount


def parse_coin(value: Any, *, name: str = "amount") -> Coin:
    obj = _require_object(value, name=name)
    denom = obj.get("denom")
    if not isinstance(denom, str) or not denom.strip():
        raise InvalidMessage(f"{name}.denom must be a non-empty string")
    if "amount" not in obj:
        raise InvalidMessage(f"{name}.amount is required")
    return Coin(denom=denom.strip(), amount=parse_amount(obj["amount"], name=f"{name}.amount"))


def require_denom(coin: Coin, denom: str) -> int:
    """Return the coin amount if it is in the pool's denomination."""
    if coin.denom != denom:
        raise DenomMismatch(coin.denom, denom)
    return coin.amount


def parse_execute(message: Any) -> ExecuteRequest:
    tag, body = _single_entry(message, name="execute")
    if tag == Action.CLAIM.value:
        if body:
            raise InvalidMessage("claim takes no arguments")
        return ExecuteRequest(action=Action.CLAIM)
    if tag in (Action.STAKE.value, Action.WITHDRAW.value):
        if "amount" not in body:
            raise InvalidMessage(f"{tag}.amount is required")
        return ExecuteRequest(action=Action(tag), amount=parse_coin(body["amount"], name=f"{tag}.amount"))
    raise InvalidMessage(f"unknown execute message: {tag!r}")


def parse_query(message: Any) -> QueryRequest:
    tag, body = _single_entry(message, name="query")
    if tag == "config":
        return ConfigQuery()
    if tag == "participant":
        address = body.get("address")
        if not isinstance(address, str) or not address.strip():
            raise InvalidMessage("participant.address must be a non-empty string")
        # Canonicalized by the service's identity validator.
        return ParticipantQuery(address=address)
    raise InvalidMessage(f"unknown query message: {tag!r}")

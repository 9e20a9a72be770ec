"""
Parameter and type-slot model for action definitions.

Each ``ParamDef`` knows how to take a caller or indexer value to its
canonical Python form (``coerce``), to its BCS wire form (``encode``) and to
the JSON form an indexer reports (``project``). Staging, conversion and the
round-trip projection all go through these three methods, so a parameter
list is declared once in the catalog and never restated.

Examples:
    >>> p = ParamDef("amount", ParamType.U64)
    >>> p.coerce("1000")
    1000
    >>> p.encode(1000).hex()
    'e803000000000000'
    >>> ParamDef("cliff_time", ParamType.OPTION_U64, optional=True).encode(None)
    b'\\x00'

Tags:
    catalog, parameters, bcs, type-slots, intent-spine
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from intent_spine.ledger import bcs
from intent_spine.ledger.types import normalize_address

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """``amountPerIteration`` → ``amount_per_iteration``; snake_case passes through."""
    return _CAMEL_RE.sub(r"_\1", name).lower()


def to_camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def normalize_keys(values: Mapping[str, Any]) -> dict[str, Any]:
    return {to_snake_case(k): v for k, v in values.items()}


class ParamType(str, Enum):
    """Wire types a staged parameter can have."""

    U8 = "u8"
    U64 = "u64"
    U128 = "u128"
    BOOL = "bool"
    STRING = "string"
    ADDRESS = "address"
    ID = "id"
    BYTES = "vector<u8>"
    STRING_VECTOR = "vector<string>"
    ADDRESS_VECTOR = "vector<address>"
    OPTION_U64 = "option<u64>"
    OPTION_U128 = "option<u128>"
    OPTION_BOOL = "option<bool>"
    OPTION_STRING = "option<string>"
    OPTION_BYTES = "option<vector<u8>>"
    SIGNED_U128 = "signed_u128"
    OPTION_SIGNED_U128 = "option<signed_u128>"
    TIER_SPECS = "tier_specs"
    CONDITIONAL_METADATA = "conditional_metadata"

    @property
    def is_option(self) -> bool:
        return self.value.startswith("option<") or self is ParamType.CONDITIONAL_METADATA

    @property
    def inner(self) -> ParamType:
        """The wrapped type of an ``option<T>``; ``self`` otherwise."""
        if self.value.startswith("option<"):
            return ParamType(self.value[len("option<"):-1])
        return self


class TypeSlot(str, Enum):
    """Generic type parameters an action can be instantiated with."""

    COIN_TYPE = "CoinType"
    ASSET_TYPE = "AssetType"
    STABLE_TYPE = "StableType"
    OBJECT_TYPE = "ObjectType"
    CAP_TYPE = "CapType"
    KEY_TYPE = "KeyType"
    LP_TYPE = "LpType"

    @property
    def field(self) -> str:
        """Config field carrying this slot's value (``coin_type``)."""
        return to_snake_case(self.value)


# =============================================================================
# COMPOSITE VALUES
# =============================================================================


@dataclass(frozen=True)
class SignedU128:
    magnitude: int
    is_negative: bool = False

    @classmethod
    def from_value(cls, value: Any) -> SignedU128:
        if isinstance(value, SignedU128):
            return value
        if isinstance(value, Mapping):
            value = normalize_keys(value)
            magnitude = _to_int(value.get("value", value.get("magnitude")), bcs.U128_MAX, "signed_u128")
            return cls(magnitude, _to_bool(value.get("is_negative", False)))
        number = _to_int_signed(value)
        if abs(number) > bcs.U128_MAX:
            raise ValueError(f"signed_u128 out of range: {number}")
        return cls(abs(number), number < 0)

    def encode(self) -> bytes:
        return bcs.u128(self.magnitude) + bcs.boolean(self.is_negative)

    def to_json(self) -> dict[str, Any]:
        return {"value": str(self.magnitude), "is_negative": self.is_negative}


@dataclass(frozen=True)
class RecipientMint:
    recipient: str
    amount: int


@dataclass(frozen=True)
class TierSpec:
    price_threshold: int
    is_above: bool
    recipients: tuple[RecipientMint, ...]
    tier_description: str

    @classmethod
    def from_value(cls, value: Any) -> TierSpec:
        if isinstance(value, TierSpec):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"tier spec must be a mapping, got {type(value).__name__}")
        value = normalize_keys(value)
        recipients = []
        for entry in _to_list(value.get("recipients") or []):
            if not isinstance(entry, Mapping):
                raise TypeError(f"tier recipient must be a mapping, got {type(entry).__name__}")
            entry = normalize_keys(entry)
            recipients.append(RecipientMint(
                recipient=normalize_address(entry["recipient"]),
                amount=_to_int(entry["amount"], bcs.U64_MAX, "amount"),
            ))
        if not recipients:
            raise ValueError("tier spec needs at least one recipient")
        return cls(
            price_threshold=_to_int(value["price_threshold"], bcs.U128_MAX, "price_threshold"),
            is_above=_to_bool(value["is_above"]),
            recipients=tuple(recipients),
            tier_description=_to_str(value.get("tier_description", "")),
        )

    def encode(self) -> bytes:
        return (
            bcs.u128(self.price_threshold)
            + bcs.boolean(self.is_above)
            + bcs.vector(lambda r: bcs.address(r.recipient) + bcs.u64(r.amount), self.recipients)
            + bcs.string(self.tier_description)
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "price_threshold": str(self.price_threshold),
            "is_above": self.is_above,
            "recipients": [{"recipient": r.recipient, "amount": str(r.amount)} for r in self.recipients],
            "tier_description": self.tier_description,
        }


@dataclass(frozen=True)
class ConditionalMetadata:
    decimals: int
    coin_name_prefix: str
    coin_icon_url: bytes

    @classmethod
    def from_value(cls, value: Any) -> ConditionalMetadata:
        if isinstance(value, ConditionalMetadata):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"conditional metadata must be a mapping, got {type(value).__name__}")
        value = normalize_keys(value)
        return cls(
            decimals=_to_int(value["decimals"], bcs.U8_MAX, "decimals"),
            coin_name_prefix=_to_str(value["coin_name_prefix"]),
            coin_icon_url=_to_bytes(value.get("coin_icon_url", b"")),
        )

    def encode(self) -> bytes:
        return bcs.u8(self.decimals) + bcs.string(self.coin_name_prefix) + bcs.byte_vector(self.coin_icon_url)

    def to_json(self) -> dict[str, Any]:
        return {
            "decimals": self.decimals,
            "coin_name_prefix": self.coin_name_prefix,
            "coin_icon_url": list(self.coin_icon_url),
        }


# =============================================================================
# SCALAR COERCION
# =============================================================================


def _to_int(value: Any, maximum: int, kind: str) -> int:
    if isinstance(value, bool):
        raise TypeError(f"{kind} expects an integer, got bool")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise TypeError(f"{kind} expects an integer, got {type(value).__name__}")
    if not 0 <= value <= maximum:
        raise ValueError(f"{kind} out of range: {value}")
    return value


def _to_int_signed(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected an integer, got bool")
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    if not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return value


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise TypeError(f"expected a bool, got {value!r}")


def _to_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if value.startswith("0x"):
            return bytes.fromhex(value[2:])
        return value.encode("utf-8")
    if isinstance(value, (list, tuple)):
        return bytes(_to_int(b, bcs.U8_MAX, "byte") for b in value)
    raise TypeError(f"expected bytes, got {type(value).__name__}")


def _to_list(value: Any) -> list[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise TypeError(f"expected a list, got {type(value).__name__}")
    return list(value)


def _coerce_scalar(kind: ParamType, value: Any) -> Any:
    if kind is ParamType.U8:
        return _to_int(value, bcs.U8_MAX, "u8")
    if kind is ParamType.U64:
        return _to_int(value, bcs.U64_MAX, "u64")
    if kind is ParamType.U128:
        return _to_int(value, bcs.U128_MAX, "u128")
    if kind is ParamType.BOOL:
        return _to_bool(value)
    if kind is ParamType.STRING:
        return _to_str(value)
    if kind in (ParamType.ADDRESS, ParamType.ID):
        return normalize_address(_to_str(value))
    if kind is ParamType.BYTES:
        return _to_bytes(value)
    if kind is ParamType.STRING_VECTOR:
        return [_to_str(v) for v in _to_list(value)]
    if kind is ParamType.ADDRESS_VECTOR:
        return [normalize_address(_to_str(v)) for v in _to_list(value)]
    if kind is ParamType.SIGNED_U128:
        return SignedU128.from_value(value)
    if kind is ParamType.TIER_SPECS:
        specs = [TierSpec.from_value(v) for v in _to_list(value)]
        if not specs:
            raise ValueError("at least one tier is required")
        return specs
    if kind is ParamType.CONDITIONAL_METADATA:
        return ConditionalMetadata.from_value(value)
    raise TypeError(f"Unsupported parameter type: {kind.value}")


def _encode_scalar(kind: ParamType, value: Any) -> bytes:
    if kind is ParamType.U8:
        return bcs.u8(value)
    if kind is ParamType.U64:
        return bcs.u64(value)
    if kind is ParamType.U128:
        return bcs.u128(value)
    if kind is ParamType.BOOL:
        return bcs.boolean(value)
    if kind is ParamType.STRING:
        return bcs.string(value)
    if kind in (ParamType.ADDRESS, ParamType.ID):
        return bcs.address(value)
    if kind is ParamType.BYTES:
        return bcs.byte_vector(value)
    if kind is ParamType.STRING_VECTOR:
        return bcs.vector(bcs.string, value)
    if kind is ParamType.ADDRESS_VECTOR:
        return bcs.vector(bcs.address, value)
    if kind is ParamType.TIER_SPECS:
        return bcs.vector(TierSpec.encode, value)
    if kind in (ParamType.SIGNED_U128, ParamType.CONDITIONAL_METADATA):
        return value.encode()
    raise TypeError(f"Unsupported parameter type: {kind.value}")


def _project_scalar(kind: ParamType, value: Any) -> Any:
    if kind in (ParamType.U64, ParamType.U128):
        return str(value)
    if kind is ParamType.BYTES:
        return list(value)
    if kind is ParamType.TIER_SPECS:
        return [spec.to_json() for spec in value]
    if kind in (ParamType.SIGNED_U128, ParamType.CONDITIONAL_METADATA):
        return value.to_json()
    return value


@dataclass(frozen=True)
class ParamDef:
    """One ordered, typed parameter of a staging call."""

    name: str
    type: ParamType
    optional: bool = False
    description: str = ""

    @property
    def wire_name(self) -> str:
        """camelCase name an indexer reports."""
        return to_camel_case(self.name)

    def coerce(self, value: Any) -> Any:
        """Canonical Python value, or None for an absent optional.

        Raises:
            TypeError / ValueError: If the value does not fit the declared type
        """
        if value is None:
            if self.type.is_option or self.optional:
                return None
            raise ValueError(f"{self.name} is required")
        return _coerce_scalar(self.type.inner, value)

    def validate(self, value: Any) -> list[str]:
        """Problems with ``value``; empty when it coerces and encodes cleanly."""
        try:
            self.encode(self.coerce(value))
        except (TypeError, ValueError, KeyError) as e:
            return [f"{self.name}: {e}"]
        return []

    def encode(self, value: Any) -> bytes:
        """BCS bytes for a canonical value; absent optionals encode as ``none``."""
        if self.type.is_option:
            return bcs.option(lambda v: _encode_scalar(self.type.inner, v), value)
        return _encode_scalar(self.type, value)

    def project(self, value: Any) -> Any:
        if value is None:
            return None
        return _project_scalar(self.type.inner, value)


__all__ = [
    "ParamType",
    "ParamDef",
    "TypeSlot",
    "SignedU128",
    "TierSpec",
    "RecipientMint",
    "ConditionalMetadata",
    "to_snake_case",
    "to_camel_case",
    "normalize_keys",
]

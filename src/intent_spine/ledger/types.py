"""Move type tags and address normalization.

Type strings arrive from three places that never agree on formatting: the
catalog (``account_actions::vault::CreateStream``), configured package ids
(``0xabc``) and the indexer (``0x0000…0abc::vault::CreateStream<0x2::sui::SUI>``).
Everything is compared after ``normalize_type``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

ADDRESS_LENGTH = 32

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]+$")
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

PRIMITIVES = frozenset({"bool", "u8", "u16", "u32", "u64", "u128", "u256", "address", "signer"})


def is_hex_address(value: str) -> bool:
    return bool(_HEX_RE.match(value)) and len(value.removeprefix("0x")) <= ADDRESS_LENGTH * 2


def normalize_address(value: str) -> str:
    """Lower-case, ``0x``-prefixed, zero-padded to 32 bytes.

    Raises:
        ValueError: If ``value`` is not a hex address
    """
    if not isinstance(value, str) or not is_hex_address(value.strip()):
        raise ValueError(f"Not a hex address: {value!r}")
    digits = value.strip().lower().removeprefix("0x")
    return "0x" + digits.rjust(ADDRESS_LENGTH * 2, "0")


def short_address(value: str) -> str:
    """``0x000…02`` → ``0x2``; used for display only."""
    digits = normalize_address(value)[2:].lstrip("0")
    return "0x" + (digits or "0")


@dataclass(frozen=True)
class TypeTag:
    """A parsed Move type.

    Struct types have ``address``/``module``/``name``; primitives and vectors
    only have ``name`` (``u64``, ``vector``). ``address`` may be a named alias
    (``account_actions``) rather than a hex id.
    """

    name: str
    address: str | None = None
    module: str | None = None
    params: tuple[TypeTag, ...] = ()

    @property
    def is_struct(self) -> bool:
        return self.module is not None

    @property
    def base(self) -> str:
        """The type without its generic parameterization."""
        if not self.is_struct:
            return self.name
        return f"{self.address}::{self.module}::{self.name}"

    @property
    def module_name(self) -> str | None:
        """``module::Name`` or None for non-struct types."""
        if not self.is_struct:
            return None
        return f"{self.module}::{self.name}"

    def without_params(self) -> TypeTag:
        return TypeTag(name=self.name, address=self.address, module=self.module)

    def __str__(self) -> str:
        if not self.params:
            return self.base
        return f"{self.base}<{', '.join(str(p) for p in self.params)}>"


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on ``sep`` outside angle brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
            if depth < 0:
                raise ValueError(f"Unbalanced '>' in type: {text!r}")
        if ch == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    if depth != 0:
        raise ValueError(f"Unbalanced '<' in type: {text!r}")
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def parse_type_tag(text: str) -> TypeTag:
    """Parse ``addr::module::Name<T1, T2>``, ``vector<u8>`` or ``u64``.

    Hex addresses are normalized; named addresses are kept verbatim.

    Raises:
        ValueError: On malformed input
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty type string")

    params: tuple[TypeTag, ...] = ()
    head = text
    if text.endswith(">"):
        open_at = text.find("<")
        if open_at <= 0:
            raise ValueError(f"Malformed generic type: {text!r}")
        head = text[:open_at]
        inner = text[open_at + 1:-1]
        if not inner.strip():
            raise ValueError(f"Empty type parameter list in {text!r}")
        params = tuple(parse_type_tag(p) for p in split_top_level(inner))

    segments = head.split("::")
    if len(segments) == 1:
        name = segments[0].strip()
        if name not in PRIMITIVES and name != "vector":
            raise ValueError(f"Unknown primitive type: {name!r}")
        return TypeTag(name=name, params=params)
    if len(segments) != 3:
        raise ValueError(f"Expected address::module::Name, got {head!r}")

    address, module, name = (s.strip() for s in segments)
    if not _IDENT_RE.match(module) or not _IDENT_RE.match(name):
        raise ValueError(f"Malformed module or struct name in {head!r}")
    if is_hex_address(address):
        address = normalize_address(address)
    elif not _IDENT_RE.match(address):
        raise ValueError(f"Malformed address in {head!r}")
    return TypeTag(name=name, address=address, module=module, params=params)


def normalize_type(text: str) -> str:
    """Canonical string form of a type, used for equality checks."""
    return str(parse_type_tag(text))


def coin_type_of(coin_type: str) -> str:
    """The object type of ``Coin<coin_type>``."""
    return normalize_type(f"0x2::coin::Coin<{coin_type}>")

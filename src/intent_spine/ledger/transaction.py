"""Programmable transaction composition.

A ``Transaction`` is an ordered list of commands. Each ``move_call`` names a
``pkg::module::function`` target with ordered type arguments and ordered
arguments, and yields a ``Result`` that later commands can pass along. This
is the only shape in which anything reaches the ledger.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

from intent_spine.ledger import bcs
from intent_spine.ledger.types import normalize_address, normalize_type


@dataclass(frozen=True)
class Pure:
    """BCS-encoded value argument."""

    data: bytes


@dataclass(frozen=True)
class ObjectArg:
    """Object passed by id."""

    object_id: str


@dataclass(frozen=True)
class GasCoin:
    pass


@dataclass(frozen=True)
class Result:
    """Output of an earlier command, optionally one element of a tuple result."""

    index: int
    sub_index: int | None = None


Argument = Union[Pure, ObjectArg, GasCoin, Result]


@dataclass(frozen=True)
class MoveCall:
    package: str
    module: str
    function: str
    type_arguments: tuple[str, ...] = ()
    arguments: tuple[Argument, ...] = ()

    @property
    def target(self) -> str:
        return f"{self.package}::{self.module}::{self.function}"


@dataclass(frozen=True)
class SplitCoins:
    coin: Argument
    amounts: tuple[Argument, ...]


Command = Union[MoveCall, SplitCoins]


@dataclass
class Transaction:
    """Ordered command list plus the helpers to build pure/object arguments."""

    commands: list[Command] = field(default_factory=list)
    gas = GasCoin()

    def _push(self, command: Command) -> Result:
        self.commands.append(command)
        return Result(len(self.commands) - 1)

    def move_call(
        self,
        target: str,
        *,
        type_arguments: Sequence[str] = (),
        arguments: Sequence[Argument] = (),
    ) -> Result:
        package, module, function = target.split("::")
        return self._push(MoveCall(
            package=normalize_address(package),
            module=module,
            function=function,
            type_arguments=tuple(normalize_type(t) for t in type_arguments),
            arguments=tuple(arguments),
        ))

    def split_coins(self, coin: Argument, amounts: Sequence[int]) -> list[Result]:
        result = self._push(SplitCoins(coin, tuple(self.pure_u64(a) for a in amounts)))
        return [Result(result.index, i) for i in range(len(amounts))]

    # ── argument helpers ─────────────────────────────────────────

    @staticmethod
    def pure(data: bytes) -> Pure:
        return Pure(bytes(data))

    @staticmethod
    def object(object_id: str) -> ObjectArg:
        return ObjectArg(normalize_address(object_id))

    @staticmethod
    def pure_u64(value: int) -> Pure:
        return Pure(bcs.u64(value))

    @staticmethod
    def pure_bool(value: bool) -> Pure:
        return Pure(bcs.boolean(value))

    @staticmethod
    def pure_string(value: str) -> Pure:
        return Pure(bcs.string(value))

    @staticmethod
    def pure_address(value: str) -> Pure:
        return Pure(bcs.address(value))

    @staticmethod
    def pure_id(value: str) -> Pure:
        return Pure(bcs.address(value))

    @property
    def move_calls(self) -> list[MoveCall]:
        return [c for c in self.commands if isinstance(c, MoveCall)]

    def calls_to(self, module: str, function: str) -> list[MoveCall]:
        return [c for c in self.move_calls if c.module == module and c.function == function]

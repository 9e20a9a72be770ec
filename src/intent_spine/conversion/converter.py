"""
Action Converter — observed action record → ExecutionConfig.

Manifesto:
An automated executor only sees what an indexer reports. The converter
rebuilds the typed execution plan from that record using the same catalog
that produced the staging call, and refuses anything it cannot resolve
exactly. A best-guess config would be replayed against a locked batch, so a
guess is always worse than a clear error.

ARCHITECTURE
────────────
::

    convert(raw)
      1. is_known == False                  → UnparsedAction
      2. marker type → definition           (kind id only when no marker type)
                       no match            → UnknownActionKind
      3. params: flat array | keyed record  → snake_case values
      4. type slots: override → named param → inline field
                     → marker generic (position) → raw type_args
                     missing               → MissingField(slot field)
      5. execution extras (lp_type, …)      → MissingField(name)

    convert_batch(raws)          ─ fail fast, "at index i: reason"
    validate_and_convert(raws)   ─ ConversionReport with every error

Tags:
    conversion, indexer, execution-config, intent-spine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from pydantic import ValidationError as PydanticValidationError

from intent_spine.catalog.definitions import ActionDefinition
from intent_spine.catalog.params import normalize_keys
from intent_spine.catalog.registry import ActionCatalog, get_default_catalog
from intent_spine.core.errors import ConversionError, MissingField, UnknownActionKind, UnparsedAction
from intent_spine.core.logging import get_logger
from intent_spine.core.result import Err, Result, partition_results, try_result
from intent_spine.conversion.models import RawObservedAction
from intent_spine.execution.config import ExecutionConfig
from intent_spine.ledger.packages import PackageConfig
from intent_spine.ledger.types import parse_type_tag

logger = get_logger(__name__)

RawInput = Union[RawObservedAction, Mapping[str, Any]]


@dataclass(frozen=True)
class ConversionIssue:
    index: int
    type: str
    error: str
    error_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "type": self.type, "error": self.error, "error_type": self.error_type}


@dataclass(frozen=True)
class ConversionReport:
    """Outcome of ``validate_and_convert``. Configs are only present when every record converted."""

    configs: tuple[ExecutionConfig, ...] = ()
    errors: tuple[ConversionIssue, ...] = ()

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "configs": [c.to_dict() for c in self.configs],
            "errors": [e.to_dict() for e in self.errors],
        }


def _parse(raw: RawInput) -> RawObservedAction:
    if isinstance(raw, RawObservedAction):
        return raw
    try:
        return RawObservedAction.model_validate(raw)
    except PydanticValidationError as e:
        kind = (raw.get("type") or raw.get("kind")) if isinstance(raw, Mapping) else None
        raise ConversionError(
            str(kind or "?"), f"malformed action record: {e.error_count()} problem(s)", cause=e,
        ) from e


class ActionConverter:
    """
    Catalog-driven converter.

    Example:
        >>> converter = ActionConverter(packages=packages)
        >>> config = converter.convert({
        ...     "type": "mint",
        ...     "fullType": "account_actions::currency::CurrencyMint<0x2::sui::SUI>",
        ...     "params": [{"type": "u64", "name": "amount", "value": "5"}],
        ... })
        >>> config.type_arg(TypeSlot.COIN_TYPE)
        '0x000…0002::sui::SUI'
    """

    def __init__(self, catalog: ActionCatalog | None = None, packages: PackageConfig | None = None):
        catalog = catalog or get_default_catalog()
        self.catalog = catalog.bind(packages) if packages is not None else catalog

    def resolve_definition(self, raw: RawObservedAction) -> ActionDefinition:
        if raw.full_type:
            definition = self.catalog.find_by_marker_type(raw.full_type)
            if definition is None:
                raise UnknownActionKind(raw.kind, raw.full_type)
            return definition
        definition = self.catalog.find_by_id(raw.kind)
        if definition is None:
            raise UnknownActionKind(raw.kind)
        return definition

    def convert(self, raw: RawInput, *, overrides: Mapping[str, Any] | None = None) -> ExecutionConfig:
        """
        Rebuild the execution config for one observed action.

        Args:
            raw: Indexer record (model or plain mapping)
            overrides: Values the record cannot carry (``lp_treasury_cap_id``…);
                they take precedence over everything in the record

        Raises:
            UnparsedAction: The indexer flagged the record as not parsed
            UnknownActionKind: No catalog match
            MissingField: A type slot or execution extra could not be resolved
            ConversionError: A parameter value does not fit its declared type
        """
        raw = _parse(raw)
        if not raw.is_known:
            raise UnparsedAction(raw.kind)
        definition = self.resolve_definition(raw)

        params = raw.param_map()
        inline = raw.inline_fields()
        override = normalize_keys(overrides or {})
        generics = self._marker_generics(raw)

        type_args: dict = {}
        for position, slot in enumerate(definition.type_params):
            value = (
                override.get(slot.field)
                or params.get(slot.field)
                or inline.get(slot.field)
                or _at(generics, position, len(definition.type_params))
                or _at(raw.type_args, position, None)
            )
            if not value:
                raise MissingField(slot.field, action_kind=definition.id)
            if not isinstance(value, str):
                raise ConversionError(
                    definition.id, f"invalid {slot.field}: expected a type string, got {type(value).__name__}",
                    action_kind=definition.id, field=slot.field,
                )
            type_args[slot] = value

        values: dict[str, Any] = {}
        for param in definition.params:
            value = override.get(param.name, params.get(param.name))
            if value is None:
                continue
            try:
                values[param.name] = param.coerce(value)
            except (TypeError, ValueError, KeyError) as e:
                raise ConversionError(
                    definition.id, f"invalid {param.name}: {e}", action_kind=definition.id, field=param.name,
                ) from e

        extras: dict[str, Any] = {}
        for param in definition.execution_extras:
            value = override.get(param.name) or params.get(param.name) or inline.get(param.name)
            if value is None:
                raise MissingField(param.name, action_kind=definition.id)
            try:
                extras[param.name] = param.coerce(value)
            except (TypeError, ValueError) as e:
                raise ConversionError(
                    definition.id, f"invalid {param.name}: {e}", action_kind=definition.id, field=param.name,
                ) from e

        try:
            config = ExecutionConfig(definition.id, type_args, values, extras)
        except (TypeError, ValueError) as e:
            raise ConversionError(definition.id, f"malformed type argument: {e}", action_kind=definition.id) from e
        logger.debug("conversion.converted", kind=definition.id, index=raw.index)
        return config

    def convert_batch(
        self,
        raws: Iterable[RawInput],
        *,
        overrides: Mapping[int, Mapping[str, Any]] | None = None,
    ) -> list[ExecutionConfig]:
        """Convert every record or raise at the first failure.

        Raises:
            ConversionError: ``"at index i: reason"``; the original error is the cause
        """
        overrides = overrides or {}
        configs = []
        for index, raw in enumerate(raws):
            try:
                configs.append(self.convert(raw, overrides=overrides.get(index)))
            except ConversionError as e:
                raise ConversionError(
                    e.action_type, f"at index {index}: {e.reason}",
                    batch_index=index, action_kind=e.context.action_kind, field=e.context.field, cause=e,
                ) from e
        return configs

    def try_convert(self, raw: RawInput, *, overrides: Mapping[str, Any] | None = None) -> Result[ExecutionConfig]:
        """``convert`` with conversion failures returned as ``Err``."""
        return try_result(lambda: self.convert(raw, overrides=overrides), catch=(ConversionError,))

    def validate_and_convert(
        self,
        raws: Iterable[RawInput],
        *,
        overrides: Mapping[int, Mapping[str, Any]] | None = None,
    ) -> ConversionReport:
        """Convert every record, collecting one issue per failing index."""
        overrides = overrides or {}
        results = [self.try_convert(raw, overrides=overrides.get(i)) for i, raw in enumerate(raws)]
        issues = [
            ConversionIssue(index, r.error.action_type, r.error.message, type(r.error).__name__)
            for index, r in enumerate(results)
            if isinstance(r, Err)
        ]
        if issues:
            logger.info("conversion.failed", errors=[i.to_dict() for i in issues])
            return ConversionReport(errors=tuple(issues))
        configs, _ = partition_results(results)
        return ConversionReport(configs=tuple(configs))

    @staticmethod
    def _marker_generics(raw: RawObservedAction) -> list[str]:
        if not raw.full_type:
            return []
        try:
            return [str(p) for p in parse_type_tag(raw.full_type).params]
        except ValueError:
            return []


def _at(values: list[str] | None, position: int, expected_len: int | None) -> str | None:
    """Positional value; when ``expected_len`` is given the list must have exactly that length."""
    if not values:
        return None
    if expected_len is not None and len(values) != expected_len:
        return None
    return values[position] if position < len(values) else None


# =============================================================================
# MODULE-LEVEL CONVENIENCE
# =============================================================================

_default_converter: ActionConverter | None = None


def get_default_converter() -> ActionConverter:
    global _default_converter
    if _default_converter is None:
        _default_converter = ActionConverter()
    return _default_converter


def convert(raw: RawInput, *, overrides: Mapping[str, Any] | None = None) -> ExecutionConfig:
    return get_default_converter().convert(raw, overrides=overrides)


def convert_batch(raws: Iterable[RawInput], **kwargs: Any) -> list[ExecutionConfig]:
    return get_default_converter().convert_batch(raws, **kwargs)


def validate_and_convert(raws: Iterable[RawInput], **kwargs: Any) -> ConversionReport:
    return get_default_converter().validate_and_convert(raws, **kwargs)

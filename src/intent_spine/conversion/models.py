"""Indexer-side record of one staged or executed action."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from intent_spine.catalog.params import normalize_keys, to_snake_case


class ObservedParam(BaseModel):
    """One entry of the flat-array parameter encoding."""

    model_config = ConfigDict(extra="allow")

    name: str
    value: Any = None
    type: str | None = None


class RawObservedAction(BaseModel):
    """
    Action record as an indexer reports it.

    Accepts both snake_case and camelCase keys, and both parameter
    encodings: ``[{type, name, value}, …]`` or ``{name: value}``. Fields the
    model does not declare (``coin_type`` variants, ``lp_type``…) are kept as
    inline fields.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    kind: str = Field(validation_alias=AliasChoices("type", "kind", "action"))
    index: int | None = None
    full_type: str | None = Field(
        default=None, validation_alias=AliasChoices("full_type", "fullType", "fullyQualifiedType"),
    )
    package_id: str | None = Field(default=None, validation_alias=AliasChoices("package_id", "packageId"))
    coin_type: str | None = Field(default=None, validation_alias=AliasChoices("coin_type", "coinType"))
    type_args: list[str] | None = Field(default=None, validation_alias=AliasChoices("type_args", "typeArgs"))
    params: list[ObservedParam] | dict[str, Any] = Field(default_factory=dict)
    is_known: bool = Field(default=True, validation_alias=AliasChoices("is_known", "isKnown"))
    phase: str | None = None
    raw_args: list[Any] | None = Field(default=None, validation_alias=AliasChoices("raw_args", "rawArgs"))

    def param_map(self) -> dict[str, Any]:
        """Parameters keyed by canonical snake_case name, whichever encoding was used."""
        if isinstance(self.params, list):
            return {to_snake_case(p.name): p.value for p in self.params}
        return normalize_keys(self.params)

    def inline_fields(self) -> dict[str, Any]:
        fields = normalize_keys(self.model_extra or {})
        if self.coin_type:
            fields["coin_type"] = self.coin_type
        return fields

"""Sample values for catalog-wide tests (round trip, arity)."""

from __future__ import annotations

from typing import Any

from intent_spine.catalog.definitions import ActionDefinition
from intent_spine.catalog.params import ParamType, TypeSlot

SUI = "0x2::sui::SUI"
ASSET = "0xa55e7::asset::ASSET"
STABLE = "0x57ab1e::usdc::USDC"
LP = "0x1b::lp::LP"
RECIPIENT = "0xbeef"
CREATOR = "0xc0ffee"
CRANKER = "0xc4a4c"

SLOT_SAMPLES: dict[TypeSlot, str] = {
    TypeSlot.COIN_TYPE: SUI,
    TypeSlot.ASSET_TYPE: ASSET,
    TypeSlot.STABLE_TYPE: STABLE,
    TypeSlot.OBJECT_TYPE: "0x2::package::UpgradeCap",
    TypeSlot.CAP_TYPE: "0xcafe::admin::AdminCap",
    TypeSlot.KEY_TYPE: "0xcafe::currency::CoinMetadataKey<0x2::sui::SUI>",
    TypeSlot.LP_TYPE: LP,
}

PARAM_SAMPLES: dict[ParamType, Any] = {
    ParamType.U8: 6,
    ParamType.U64: 1_000,
    ParamType.U128: 10**20,
    ParamType.BOOL: True,
    ParamType.STRING: "treasury",
    ParamType.ADDRESS: RECIPIENT,
    ParamType.ID: "0xd00d",
    ParamType.BYTES: b"\x01\x02",
    ParamType.STRING_VECTOR: ["alpha", "beta"],
    ParamType.ADDRESS_VECTOR: [RECIPIENT],
    ParamType.OPTION_U64: 5_000,
    ParamType.OPTION_U128: 7,
    ParamType.OPTION_BOOL: False,
    ParamType.OPTION_STRING: "renamed",
    ParamType.OPTION_BYTES: b"\x03",
    ParamType.SIGNED_U128: -42,
    ParamType.OPTION_SIGNED_U128: 42,
    ParamType.TIER_SPECS: [
        {
            "price_threshold": 2_000_000,
            "is_above": True,
            "recipients": [{"recipient": RECIPIENT, "amount": 500}],
            "tier_description": "first tier",
        },
    ],
    ParamType.CONDITIONAL_METADATA: {
        "decimals": 9,
        "coin_name_prefix": "c",
        "coin_icon_url": "https://example.com/icon.png",
    },
}

POOL_EXTRAS = {
    "lp_type": LP,
    "lp_treasury_cap_id": "0xe20",
    "lp_metadata_id": "0xe21",
}


def sample_config(definition: ActionDefinition, **overrides: Any) -> dict[str, Any]:
    """A staging config that fills every parameter and type slot of ``definition``."""
    config: dict[str, Any] = {slot.field: SLOT_SAMPLES[slot] for slot in definition.type_params}
    for param in definition.params:
        config[param.name] = PARAM_SAMPLES[param.type]
    config.update(overrides)
    return config


def sample_extras(definition: ActionDefinition) -> dict[str, Any]:
    return {p.name: POOL_EXTRAS[p.name] for p in definition.execution_extras}

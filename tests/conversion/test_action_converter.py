"""
Tests for ActionConverter.

Covers:
- Definition resolution (marker type first, kind id only without one)
- Refusals: unparsed, unknown, missing slot or extra, bad value
- Both parameter encodings and camelCase records
- Slot resolution order
- Batch policies: fail-fast and collect-all
"""

import pytest

from intent_spine.catalog.params import TypeSlot
from intent_spine.conversion import (
    ActionConverter,
    ConversionReport,
    RawObservedAction,
    convert,
    convert_batch,
    validate_and_convert,
)
from intent_spine.core.errors import ConversionError, MissingField, UnknownActionKind, UnparsedAction
from intent_spine.core.result import Err, Ok
from intent_spine.ledger.types import normalize_address, normalize_type

from _support.samples import ASSET, LP, POOL_EXTRAS, STABLE, SUI

MINT = {
    "type": "mint",
    "fullType": f"account_actions::currency::CurrencyMint<{SUI}>",
    "params": [{"type": "u64", "name": "amount", "value": "5"}],
}

MEMO = {"type": "memo", "fullType": "account_actions::memo::Memo", "params": {"message": "gm"}}


class TestResolution:
    def test_marker_type_wins_over_kind(self):
        """The record's kind label is ignored when a marker type is present."""
        config = convert({**MINT, "type": "CurrencyMint"})
        assert config.kind == "mint"

    def test_kind_id_without_marker(self):
        config = convert({"type": "memo", "params": {"message": "gm"}})
        assert config.kind == "memo"
        assert config.params["message"] == "gm"

    def test_unknown_marker(self):
        """A present but unknown marker is not rescued by the kind id."""
        with pytest.raises(UnknownActionKind, match="unknown marker type") as exc_info:
            convert({**MEMO, "fullType": "account_actions::memo::Shout"})
        assert exc_info.value.full_type == "account_actions::memo::Shout"

    def test_unknown_kind(self):
        with pytest.raises(UnknownActionKind, match="unknown action kind"):
            convert({"type": "teleport"})

    def test_deployed_address_needs_packages(self, packages):
        record = {**MEMO, "fullType": f"{packages.account_actions}::memo::Memo"}
        with pytest.raises(UnknownActionKind):
            ActionConverter().convert(record)
        assert ActionConverter(packages=packages).convert(record).kind == "memo"

    def test_unparsed(self):
        with pytest.raises(UnparsedAction, match="is_known=false"):
            convert({**MINT, "isKnown": False})

    def test_malformed_record(self):
        with pytest.raises(ConversionError, match="malformed action record"):
            convert({"params": {}})


class TestParams:
    def test_flat_encoding(self):
        config = convert(MINT)
        assert dict(config.params) == {"amount": 5}
        assert config.type_arg(TypeSlot.COIN_TYPE) == normalize_type(SUI)

    def test_keyed_camel_case(self):
        config = convert({
            "type": "spend",
            "fullType": f"account_actions::vault::VaultSpend<{SUI}>",
            "params": {"vaultName": "treasury", "amount": "100", "spendAll": False, "resourceName": "coins"},
        })
        assert dict(config.params) == {"vault_name": "treasury", "amount": 100, "spend_all": False,
                                       "resource_name": "coins"}

    def test_absent_params_are_skipped(self):
        config = convert({"type": "mint", "fullType": MINT["fullType"]})
        assert "amount" not in config.params

    def test_bad_value(self):
        with pytest.raises(ConversionError, match="invalid amount") as exc_info:
            convert({**MINT, "params": {"amount": "lots"}})
        assert exc_info.value.context.field == "amount"

    def test_addresses_normalized(self):
        config = convert({
            "type": "return_treasury_cap",
            "fullType": f"account_actions::currency::RemoveTreasuryCap<{SUI}>",
            "params": {"recipient": "0xBEEF"},
        })
        assert config.params["recipient"] == normalize_address("0xbeef")

    def test_model_input(self):
        raw = RawObservedAction.model_validate(MINT)
        assert convert(raw).params["amount"] == 5


class TestTypeSlots:
    """override → param → inline field → marker generic → type_args."""

    BARE = {"type": "mint", "fullType": "account_actions::currency::CurrencyMint", "params": {"amount": 1}}

    def test_inline_coin_type(self):
        config = convert({**self.BARE, "coinType": STABLE})
        assert config.type_arg(TypeSlot.COIN_TYPE) == normalize_type(STABLE)

    def test_raw_type_args(self):
        config = convert({**self.BARE, "typeArgs": [ASSET]})
        assert config.type_arg(TypeSlot.COIN_TYPE) == normalize_type(ASSET)

    def test_override_wins(self):
        config = convert(MINT, overrides={"coinType": ASSET})
        assert config.type_arg(TypeSlot.COIN_TYPE) == normalize_type(ASSET)

    def test_inline_beats_marker_generic(self):
        config = convert({**MINT, "coinType": STABLE})
        assert config.type_arg(TypeSlot.COIN_TYPE) == normalize_type(STABLE)

    def test_generic_count_must_match(self):
        """Generics are only read positionally when the count equals the slot count."""
        record = {
            "type": "return_metadata",
            "fullType": f"account_actions::currency::RemoveMetadata<{SUI}>",
            "params": {"recipient": "0xbeef"},
        }
        with pytest.raises(MissingField) as exc_info:
            convert(record)
        assert exc_info.value.name == "key_type"

    def test_missing_slot(self):
        with pytest.raises(MissingField, match="coin_type") as exc_info:
            convert(self.BARE)
        assert exc_info.value.context.action_kind == "mint"


class TestExtras:
    POOL = {
        "type": "create_pool_with_mint",
        "fullType": f"futarchy_actions::liquidity_init_actions::CreatePoolWithMint<{ASSET}, {STABLE}>",
        "params": {"vaultName": "treasury", "assetAmount": "1000", "stableAmount": "1000",
                   "feeBps": "30", "launchFeeDurationMs": "0"},
    }

    def test_extras_required(self):
        with pytest.raises(MissingField) as exc_info:
            convert(self.POOL)
        assert exc_info.value.name == "lp_type"

    def test_extras_from_overrides(self):
        config = convert(self.POOL, overrides=POOL_EXTRAS)
        assert config.extra("lp_type") == LP
        assert config.extra("lp_treasury_cap_id") == normalize_address(POOL_EXTRAS["lp_treasury_cap_id"])
        assert config.type_arg(TypeSlot.ASSET_TYPE) == normalize_type(ASSET)

    def test_extras_inline(self):
        config = convert({**self.POOL, **{"lpType": LP, "lpTreasuryCapId": "0xe20", "lpMetadataId": "0xe21"}})
        assert config.extra("lp_metadata_id") == normalize_address("0xe21")


class TestBatch:
    def test_convert_batch_in_order(self):
        configs = convert_batch([MEMO, MINT])
        assert [c.kind for c in configs] == ["memo", "mint"]

    def test_convert_batch_fails_fast(self):
        with pytest.raises(ConversionError, match="at index 1") as exc_info:
            convert_batch([MEMO, {"type": "teleport"}, MINT])
        err = exc_info.value
        assert err.context.batch_index == 1
        assert isinstance(err.cause, UnknownActionKind)

    def test_convert_batch_overrides_by_index(self):
        configs = convert_batch([MINT, MINT], overrides={1: {"coin_type": ASSET}})
        assert configs[0].type_arg(TypeSlot.COIN_TYPE) == normalize_type(SUI)
        assert configs[1].type_arg(TypeSlot.COIN_TYPE) == normalize_type(ASSET)

    def test_validate_and_convert_collects_every_error(self):
        """One bad record in three: no configs, exactly one issue at its index."""
        report = validate_and_convert([MEMO, {"type": "teleport"}, MINT])
        assert isinstance(report, ConversionReport)
        assert report.success is False
        assert report.configs == ()
        assert [(e.index, e.type, e.error_type) for e in report.errors] == [(1, "teleport", "UnknownActionKind")]
        assert report.to_dict()["errors"][0]["index"] == 1

    @pytest.mark.parametrize("coin_type", [7, ["0x2::sui::SUI"], {"name": "SUI"}])
    def test_validate_and_convert_reports_non_string_type_args(self, coin_type):
        """A type slot holding a non-string is one more reported issue, not a crash."""
        bad = {"type": "mint", "params": {"amount": "5", "coinType": coin_type}}
        report = validate_and_convert([MEMO, bad])
        assert report.success is False
        [issue] = report.errors
        assert (issue.index, issue.type, issue.error_type) == (1, "mint", "ConversionError")
        assert "coin_type" in issue.error

    def test_validate_and_convert_success(self):
        report = validate_and_convert([MEMO, MINT])
        assert report.success
        assert [c.kind for c in report.configs] == ["memo", "mint"]
        assert report.to_dict()["configs"][1]["params"] == {"amount": 5}

    def test_try_convert(self):
        converter = ActionConverter()
        assert isinstance(converter.try_convert(MEMO), Ok)
        failed = converter.try_convert({"type": "teleport"})
        assert isinstance(failed, Err)
        assert failed.unwrap_or(None) is None

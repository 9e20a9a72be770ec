"""Tests for ``intent_spine.catalog.registry`` — invariants, lookups, listings, idempotence."""

from __future__ import annotations

from dataclasses import replace

import pytest

from intent_spine.catalog.definitions import ActionCategory, IntentContext
from intent_spine.catalog.registry import (
    ActionCatalog,
    CatalogInvariantError,
    get_default_catalog,
    reset_default_catalog,
)
from intent_spine.catalog.shapes import CAP, REGISTRY, SLOTS
from intent_spine.catalog.table import ALL_ACTIONS
from intent_spine.core.errors import CatalogLookupError
from intent_spine.ledger.packages import PackageKey


class TestCatalogInvariants:
    """The shipped table and the checks run on construction."""

    def test_default_table_is_consistent(self, catalog):
        """Every id and marker type is unique and every entry is reachable by id."""
        ids = catalog.action_ids()
        assert len(ids) == len(set(ids)) == len(ALL_ACTIONS)
        assert len({d.marker_type for d in catalog}) == len(catalog)
        for definition in catalog:
            assert catalog.lookup_by_id(definition.id) is definition

    def test_every_definition_supports_a_context(self, catalog):
        """No entry is unreachable from both triggers."""
        for definition in catalog:
            assert definition.contexts
            assert definition.execution_shape.type_args.count(SLOTS) == 1

    def test_duplicate_id_rejected(self):
        """Two entries with the same id cannot share a catalog."""
        first = ALL_ACTIONS[0]
        clone = replace(first, marker_type=f"{first.package_alias}::other::Marker")
        with pytest.raises(CatalogInvariantError, match="Duplicate action id"):
            ActionCatalog([first, clone])

    def test_duplicate_marker_rejected(self):
        """Two entries with the same marker type are ambiguous for the converter."""
        first, second = ALL_ACTIONS[0], ALL_ACTIONS[1]
        with pytest.raises(CatalogInvariantError, match="Duplicate marker type"):
            ActionCatalog([first, replace(second, marker_type=first.marker_type)])

    def test_empty_contexts_rejected(self):
        """An entry with no trigger is a table error."""
        with pytest.raises(CatalogInvariantError, match="no supported context"):
            ActionCatalog([replace(ALL_ACTIONS[0], contexts=frozenset())])

    def test_marker_outside_package_alias_rejected(self):
        """The marker's address part must be the alias of the definition's package."""
        definition = get_default_catalog().lookup_by_id("create_stream")
        with pytest.raises(CatalogInvariantError, match="package alias"):
            ActionCatalog([replace(definition, marker_type="futarchy_actions::vault::CreateStream")])

    def test_invariant_error_is_value_error(self):
        """Callers catching ValueError still see table problems."""
        assert issubclass(CatalogInvariantError, ValueError)


class TestLookupById:
    """``find_by_id`` / ``lookup_by_id``."""

    def test_lookup_known(self, catalog):
        """A registered id resolves to its definition."""
        definition = catalog.lookup_by_id("create_stream")
        assert definition.category is ActionCategory.STREAM
        assert definition.package is PackageKey.ACCOUNT_ACTIONS

    def test_lookup_unknown_raises(self, catalog):
        """An unregistered id raises with the known ids attached."""
        with pytest.raises(CatalogLookupError) as exc_info:
            catalog.lookup_by_id("teleport")
        assert exc_info.value.key == "teleport"
        assert "memo" in exc_info.value.available

    def test_find_unknown_returns_none(self, catalog):
        """The non-raising variant returns None."""
        assert catalog.find_by_id("teleport") is None

    def test_contains(self, catalog):
        """``in`` checks ids."""
        assert "memo" in catalog
        assert "teleport" not in catalog


class TestLookupByMarkerType:
    """Marker-type matching ignores generics and honours package binding."""

    def test_alias_form_with_generics(self, catalog):
        """Generic parameters do not affect the match."""
        definition = catalog.lookup_by_marker_type("account_actions::vault::CreateStream<0x2::sui::SUI>")
        assert definition.id == "create_stream"

    def test_alias_form_without_generics(self, catalog):
        """The bare marker type matches too."""
        assert catalog.lookup_by_marker_type("account_actions::vault::CreateStream").id == "create_stream"

    def test_renamed_package_alias(self, catalog):
        """The oracle package is reported under its named address."""
        marker = "futarchy_oracle::oracle_actions::CreateOracleGrant<0x1::a::A, 0x1::b::B>"
        assert catalog.lookup_by_marker_type(marker).id == "create_oracle_grant"

    def test_hex_form_needs_binding(self, catalog, packages):
        """A deployed address is only known once the catalog is bound."""
        marker = f"{packages.account_actions}::vault::CreateStream<0x2::sui::SUI>"
        assert catalog.find_by_marker_type(marker) is None
        assert catalog.bind(packages).lookup_by_marker_type(marker).id == "create_stream"

    def test_short_hex_address_matches(self, catalog, packages):
        """Unpadded addresses are normalized before the package lookup."""
        bound = catalog.bind(packages)
        assert bound.lookup_by_marker_type("0xa2::vault::CreateStream").id == "create_stream"

    def test_same_struct_other_package_is_unknown(self, catalog):
        """``module::Struct`` alone is not enough; the package has to match."""
        assert catalog.find_by_marker_type("futarchy_actions::vault::CreateStream") is None

    def test_unknown_struct_on_known_package(self, catalog, packages):
        """A deployed package with an unknown struct is unknown."""
        bound = catalog.bind(packages)
        assert bound.find_by_marker_type(f"{packages.account_actions}::vault::Teleport") is None

    def test_malformed_marker(self, catalog):
        """Unparseable or primitive markers never match."""
        assert catalog.find_by_marker_type("not a type") is None
        assert catalog.find_by_marker_type("u64") is None
        with pytest.raises(CatalogLookupError):
            catalog.lookup_by_marker_type("vault::CreateStream<")


class TestLookupIdempotence:
    """Repeated lookups with identical input give structurally identical definitions."""

    @pytest.mark.parametrize("action_id", [d.id for d in ALL_ACTIONS])
    def test_lookup_by_id_is_stable(self, catalog, action_id):
        """Same object, same serialized form, every time."""
        first = catalog.lookup_by_id(action_id)
        second = catalog.lookup_by_id(action_id)
        assert first is second
        assert first.to_dict() == second.to_dict()

    @pytest.mark.parametrize("definition", ALL_ACTIONS, ids=lambda d: d.id)
    def test_lookup_by_marker_is_stable(self, catalog, packages, definition):
        """Alias and deployed-address forms resolve to the same definition."""
        bound = catalog.bind(packages)
        by_alias = [bound.lookup_by_marker_type(definition.marker_type) for _ in range(3)]
        by_address = bound.lookup_by_marker_type(definition.marker_type_for(packages))
        assert all(d == definition for d in by_alias)
        assert by_address == definition
        assert by_address.to_dict() == by_alias[0].to_dict()

    def test_rebuilt_catalog_gives_equal_definitions(self):
        """A reset default catalog is a new object with equal entries."""
        before = get_default_catalog().lookup_by_id("memo")
        reset_default_catalog()
        after = get_default_catalog().lookup_by_id("memo")
        assert before == after
        assert before.to_dict() == after.to_dict()


class TestListings:
    """Filters by category, context and package."""

    def test_list_by_category(self, catalog):
        """Every listed entry has the requested category."""
        currency = catalog.list_by_category(ActionCategory.CURRENCY)
        assert {d.id for d in currency} >= {"mint", "burn", "return_treasury_cap", "return_metadata"}
        assert all(d.category is ActionCategory.CURRENCY for d in currency)

    def test_list_by_category_accepts_string(self, catalog):
        """Enum values work as plain strings."""
        assert catalog.list_by_category("memo") == catalog.list_by_category(ActionCategory.MEMO)

    def test_list_by_context(self, catalog):
        """Launchpad-only and proposal-only entries land on their side."""
        launchpad = {d.id for d in catalog.list_by_context(IntentContext.LAUNCHPAD)}
        proposal = {d.id for d in catalog.list_by_context(IntentContext.PROPOSAL)}
        assert {"return_treasury_cap", "create_pool_with_mint", "memo"} <= launchpad
        assert "set_factory_paused" not in launchpad
        assert {"set_factory_paused", "memo"} <= proposal
        assert "return_metadata" not in proposal

    def test_list_by_package(self, catalog):
        """Governance admin actions live in the governance-actions package."""
        admin = catalog.list_by_package(PackageKey.FUTARCHY_GOVERNANCE_ACTIONS)
        assert "set_factory_paused" in {d.id for d in admin}
        assert all(d.package is PackageKey.FUTARCHY_GOVERNANCE_ACTIONS for d in admin)

    def test_categories(self, catalog):
        """All fourteen categories are populated."""
        assert set(catalog.categories()) == set(ActionCategory)

    def test_validate_for_context(self, catalog):
        """Unsupported and unknown ids are both reported, in input order."""
        check = catalog.validate_for_context(["memo", "set_factory_paused", "teleport"], IntentContext.LAUNCHPAD)
        assert check.valid is False
        assert check.unsupported == ("set_factory_paused", "teleport")
        assert catalog.validate_for_context(["memo", "mint"], "proposal").valid is True

    def test_is_supported(self, catalog):
        assert catalog.is_supported("return_treasury_cap", IntentContext.LAUNCHPAD)
        assert not catalog.is_supported("return_treasury_cap", IntentContext.PROPOSAL)
        assert not catalog.is_supported("teleport", IntentContext.PROPOSAL)


class TestDefinitionTargets:
    """Call targets and marker types derived from one definition."""

    def test_staging_and_execution_targets(self, catalog, packages):
        """Both targets live in the definition's package."""
        definition = catalog.lookup_by_id("create_stream")
        assert definition.staging_target(packages) == (
            f"{packages.account_actions}::stream_init_actions::add_create_stream_spec"
        )
        assert definition.execution_target(packages) == f"{packages.account_actions}::vault::do_init_create_stream"

    def test_marker_type_for_packages(self, catalog, packages):
        """The alias is swapped for the deployed address."""
        definition = catalog.lookup_by_id("create_pool_with_mint")
        assert definition.marker_type == "futarchy_actions::liquidity_init_actions::CreatePoolWithMint"
        assert definition.marker_type_for(packages) == (
            f"{packages.futarchy_actions}::liquidity_init_actions::CreatePoolWithMint"
        )

    def test_capability_shape_inserts_cap_after_registry(self, catalog):
        """Admin actions receive the borrowed cap right after the registry."""
        definition = catalog.lookup_by_id("set_factory_paused")
        arguments = definition.shape.arguments
        assert arguments[arguments.index(REGISTRY) + 1] == CAP
        assert CAP not in definition.execution_shape.arguments

    def test_to_dict(self, catalog):
        """Serialized form lists params and slots in declared order."""
        data = catalog.lookup_by_id("return_metadata").to_dict()
        assert data["type_params"] == ["KeyType", "CoinType"]
        assert data["params"] == [{"name": "recipient", "type": "address", "optional": False}]
        assert data["contexts"] == ["launchpad"]


class TestDefaultCatalog:
    """Module-level singleton."""

    def test_singleton(self):
        assert get_default_catalog() is get_default_catalog()

    def test_reset(self):
        first = get_default_catalog()
        reset_default_catalog()
        assert get_default_catalog() is not first

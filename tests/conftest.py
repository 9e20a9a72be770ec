"""
Shared pytest fixtures and configuration for intent-spine tests.

This module provides:
- Package ids for a deployment (distinct per package, so reverse lookups work)
- A fresh simulated ledger per test
- Workflow fixtures bound to that ledger
- Reset of the module-level catalog, dispatch table and log context

Usage:
    Fixtures are auto-discovered by pytest:

    def test_something(ledger, packages, launchpad):
        ref = launchpad.create_raise(raise_config())
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure intent_spine is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from intent_spine.catalog.registry import ActionCatalog, get_default_catalog, reset_default_catalog
from intent_spine.core.logging import clear_context
from intent_spine.core.settings import get_settings
from intent_spine.execution.dispatch import reset_default_table
from intent_spine.ledger.packages import PackageConfig
from intent_spine.ledger.simulated import SimulatedLedger
from intent_spine.orchestration.launchpad import LaunchpadWorkflow
from intent_spine.orchestration.proposal import ProposalWorkflow

from _support.samples import CREATOR


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark workflow tests as integration, everything else as unit."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if test_path.parts and test_path.parts[0] == "orchestration":
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Global State Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def reset_globals() -> Generator[None, None, None]:
    """
    Reset module-level singletons before and after each test.

    The default catalog, the default dispatch table, cached settings and
    bound log context are all process-wide; no test may leak them.
    """
    reset_default_catalog()
    reset_default_table()
    get_settings.cache_clear()
    clear_context()
    yield
    reset_default_catalog()
    reset_default_table()
    get_settings.cache_clear()
    clear_context()


# =============================================================================
# Deployment Fixtures
# =============================================================================


@pytest.fixture
def packages() -> PackageConfig:
    return PackageConfig(
        account_protocol="0xa1",
        account_actions="0xa2",
        futarchy_core="0xb1",
        futarchy_actions="0xb2",
        futarchy_governance="0xb3",
        futarchy_governance_actions="0xb4",
        futarchy_oracle_actions="0xb5",
        futarchy_factory="0xc1",
        futarchy_markets_core="0xc2",
        package_registry_id="0xd1",
        factory_id="0xd2",
        fee_manager_id="0xd3",
    )


@pytest.fixture
def catalog() -> ActionCatalog:
    return get_default_catalog()


@pytest.fixture
def ledger(packages: PackageConfig) -> SimulatedLedger:
    return SimulatedLedger(packages)


@pytest.fixture
def launchpad(ledger: SimulatedLedger, packages: PackageConfig) -> LaunchpadWorkflow:
    return LaunchpadWorkflow(ledger, packages, sender=CREATOR)


@pytest.fixture
def proposals(ledger: SimulatedLedger, packages: PackageConfig) -> ProposalWorkflow:
    return ProposalWorkflow(ledger, packages, sender=CREATOR)


@pytest.fixture
def package_env(monkeypatch: pytest.MonkeyPatch, packages: PackageConfig) -> PackageConfig:
    """Export ``packages`` as INTENT_* environment variables."""
    for name, value in packages.model_dump().items():
        monkeypatch.setenv(f"INTENT_{name.upper()}", value)
    return packages

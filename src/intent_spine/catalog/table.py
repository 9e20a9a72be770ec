"""The static action definition table.

Grouped by category in the order the on-chain packages declare them. Parameter
names are snake_case; ``ParamDef.wire_name`` gives the camelCase form an
indexer reports.
"""

from __future__ import annotations

from intent_spine.catalog.definitions import (
    ActionCategory,
    ActionDefinition,
    IntentContext,
    ResourceKind,
    ResourceRole,
    ResourceUse,
)
from intent_spine.catalog.params import ParamDef
from intent_spine.catalog.params import ParamType as T
from intent_spine.catalog.params import TypeSlot
from intent_spine.catalog.shapes import (
    ACCOUNT_CLOCK_FIRST,
    ACCOUNT_CLOCK_LAST,
    ACCOUNT_MEMO,
    ACCOUNT_METADATA,
    ACCOUNT_POOL,
    ACCOUNT_STANDARD,
    FACTORY_OWNER_CAP,
    FEE_ADMIN_CAP,
    LEADING_CLOCK_LAST,
    OUTCOME_CLOCK_FIRST,
    OUTCOME_CLOCK_LAST,
    OUTCOME_STANDARD,
    OUTCOME_TRAILING_CLOCK_LAST,
    OUTCOME_TRANSFER,
    PACKAGE_ADMIN_CAP,
    VALIDATOR_ADMIN_CAP,
    CapabilityUse,
    ExecutionShape,
)
from intent_spine.ledger.packages import PackageKey

BOTH = frozenset({IntentContext.LAUNCHPAD, IntentContext.PROPOSAL})
LAUNCHPAD = frozenset({IntentContext.LAUNCHPAD})
PROPOSAL = frozenset({IntentContext.PROPOSAL})

COIN = (TypeSlot.COIN_TYPE,)
OBJECT = (TypeSlot.OBJECT_TYPE,)
CAP = (TypeSlot.CAP_TYPE,)
STABLE = (TypeSlot.STABLE_TYPE,)
PAIR = (TypeSlot.ASSET_TYPE, TypeSlot.STABLE_TYPE)


def p(name: str, kind: T, description: str = "", optional: bool = False) -> ParamDef:
    return ParamDef(name, kind, optional=optional or kind.is_option, description=description)


def resource(role: ResourceRole, kind: ResourceKind) -> ResourceUse:
    slot = TypeSlot.COIN_TYPE if kind is ResourceKind.COIN else TypeSlot.OBJECT_TYPE
    return ResourceUse(role, kind, slot)


def action(
    id: str,
    display_name: str,
    category: ActionCategory,
    package: PackageKey,
    staging: str,
    execution: str,
    marker: str,
    *,
    params: tuple[ParamDef, ...] = (),
    slots: tuple[TypeSlot, ...] = (),
    contexts: frozenset[IntentContext] = BOTH,
    shape: ExecutionShape = ACCOUNT_STANDARD,
    resource: ResourceUse | None = None,
    extras: tuple[ParamDef, ...] = (),
    capability: CapabilityUse | None = None,
    description: str = "",
) -> ActionDefinition:
    staging_module, staging_function = staging.split("::")
    execution_module, execution_function = execution.split("::")
    return ActionDefinition(
        id=id,
        display_name=display_name,
        category=category,
        package=package,
        staging_module=staging_module,
        staging_function=staging_function,
        execution_module=execution_module,
        execution_function=execution_function,
        marker_type=marker,
        params=params,
        type_params=slots,
        contexts=contexts,
        execution_shape=shape,
        resource=resource,
        execution_extras=extras,
        capability=capability,
        description=description,
    )


RESOURCE_NAME = p("resource_name", T.STRING, "Name of the entry in the execution resource bag")
VAULT_NAME = p("vault_name", T.STRING, "Name of the vault")

AA = PackageKey.ACCOUNT_ACTIONS
AP = PackageKey.ACCOUNT_PROTOCOL
FA = PackageKey.FUTARCHY_ACTIONS
FGA = PackageKey.FUTARCHY_GOVERNANCE_ACTIONS
FO = PackageKey.FUTARCHY_ORACLE_ACTIONS

# =============================================================================
# ACCOUNT ACTIONS
# =============================================================================

TRANSFER_ACTIONS = (
    action(
        "transfer", "Transfer Object", ActionCategory.TRANSFER, AA,
        "transfer_init_actions::add_transfer_object_spec", "transfer::do_init_transfer",
        "account_actions::transfer::TransferObject",
        params=(p("recipient", T.ADDRESS, "Recipient address"), RESOURCE_NAME),
        slots=OBJECT, shape=OUTCOME_TRANSFER,
        resource=resource(ResourceRole.CONSUMES, ResourceKind.OBJECT),
        description="Transfer an object taken from the resource bag to a recipient",
    ),
    action(
        "transfer_to_sender", "Transfer to Sender", ActionCategory.TRANSFER, AA,
        "transfer_init_actions::add_transfer_to_sender_spec", "transfer::do_init_transfer_to_sender",
        "account_actions::transfer::TransferToSender",
        params=(RESOURCE_NAME,),
        slots=OBJECT, shape=OUTCOME_TRANSFER,
        resource=resource(ResourceRole.CONSUMES, ResourceKind.OBJECT),
        description="Transfer an object taken from the resource bag to the executing sender",
    ),
    action(
        "transfer_coin", "Transfer Coin", ActionCategory.TRANSFER, AA,
        "transfer_init_actions::add_transfer_coin_spec", "transfer::do_transfer_coin",
        "account_actions::transfer::TransferCoin",
        params=(p("recipient", T.ADDRESS, "Recipient address"), RESOURCE_NAME),
        slots=COIN,
        resource=resource(ResourceRole.CONSUMES, ResourceKind.COIN),
        description="Transfer a coin taken from the resource bag to a recipient",
    ),
    action(
        "transfer_coin_to_sender", "Transfer Coin to Sender", ActionCategory.TRANSFER, AA,
        "transfer_init_actions::add_transfer_coin_to_sender_spec", "transfer::do_transfer_coin_to_sender",
        "account_actions::transfer::TransferCoinToSender",
        params=(RESOURCE_NAME,),
        slots=COIN,
        resource=resource(ResourceRole.CONSUMES, ResourceKind.COIN),
        description="Transfer a coin taken from the resource bag to the executing sender",
    ),
)

VAULT_ACTIONS = (
    action(
        "deposit", "Deposit", ActionCategory.VAULT, AA,
        "vault_init_actions::add_deposit_spec", "vault::do_init_deposit",
        "account_actions::vault::VaultDeposit",
        params=(VAULT_NAME, p("amount", T.U64, "Amount to deposit"), RESOURCE_NAME),
        slots=COIN,
        resource=resource(ResourceRole.CONSUMES, ResourceKind.COIN),
        description="Deposit a coin taken from the resource bag into a vault",
    ),
    action(
        "spend", "Spend", ActionCategory.VAULT, AA,
        "vault_init_actions::add_spend_spec", "vault::do_spend",
        "account_actions::vault::VaultSpend",
        params=(
            VAULT_NAME,
            p("amount", T.U64, "Amount to spend"),
            p("spend_all", T.BOOL, "Spend the entire balance"),
            RESOURCE_NAME,
        ),
        slots=COIN,
        resource=resource(ResourceRole.PRODUCES, ResourceKind.COIN),
        description="Withdraw coins from a vault into the resource bag",
    ),
    action(
        "approve_coin_type", "Approve Coin Type", ActionCategory.VAULT, AA,
        "vault_init_actions::add_approve_coin_type_spec", "vault::do_approve_coin_type",
        "account_actions::vault::VaultApproveCoinType",
        params=(VAULT_NAME,), slots=COIN, contexts=PROPOSAL,
        description="Allow permissionless deposits of a coin type",
    ),
    action(
        "remove_approved_coin_type", "Remove Approved Coin Type", ActionCategory.VAULT, AA,
        "vault_init_actions::add_remove_approved_coin_type_spec", "vault::do_remove_approved_coin_type",
        "account_actions::vault::VaultRemoveApprovedCoinType",
        params=(VAULT_NAME,), slots=COIN, contexts=PROPOSAL,
        description="Stop permissionless deposits of a coin type",
    ),
    action(
        "cancel_stream", "Cancel Stream", ActionCategory.VAULT, AA,
        "vault_init_actions::add_cancel_stream_spec", "vault::do_cancel_stream",
        "account_actions::vault::CancelStream",
        params=(VAULT_NAME, p("stream_id", T.ID, "Stream to cancel")),
        slots=COIN, contexts=PROPOSAL, shape=ACCOUNT_CLOCK_FIRST,
        description="Cancel a vault stream and return unvested funds",
    ),
    action(
        "deposit_external", "Deposit External", ActionCategory.VAULT, AA,
        "vault_init_actions::add_deposit_external_spec", "vault::do_deposit_external",
        "account_actions::vault::VaultDepositExternal",
        params=(VAULT_NAME, p("expected_amount", T.U64, "Amount the executor must supply")),
        slots=COIN, contexts=PROPOSAL,
        description="Deposit coins supplied by the executing sender",
    ),
    action(
        "deposit_from_resources", "Deposit from Resources", ActionCategory.VAULT, AA,
        "vault_init_actions::add_deposit_from_resources_spec", "vault::do_init_deposit_from_resources",
        "account_actions::vault::VaultDepositFromResources",
        params=(RESOURCE_NAME,), slots=COIN,
        resource=resource(ResourceRole.CONSUMES, ResourceKind.COIN),
        description="Deposit a coin from the resource bag into the treasury vault",
    ),
    action(
        "withdraw_object", "Withdraw Owned Object", ActionCategory.VAULT, AP,
        "owned_init_actions::add_withdraw_object_spec", "owned_actions::do_withdraw_object",
        "account_protocol::owned::WithdrawObject",
        params=(p("object_id", T.ID, "Owned object to withdraw"), RESOURCE_NAME),
        slots=OBJECT, contexts=PROPOSAL,
        resource=resource(ResourceRole.PRODUCES, ResourceKind.OBJECT),
        description="Withdraw an object owned by the account into the resource bag",
    ),
    action(
        "withdraw_coin", "Withdraw Owned Coin", ActionCategory.VAULT, AP,
        "owned_init_actions::add_withdraw_coin_spec", "owned_actions::do_withdraw_coin",
        "account_protocol::owned::WithdrawCoin",
        params=(p("coin_id", T.ID, "Owned coin to withdraw"), RESOURCE_NAME),
        slots=COIN, contexts=PROPOSAL,
        resource=resource(ResourceRole.PRODUCES, ResourceKind.COIN),
        description="Withdraw a coin owned by the account into the resource bag",
    ),
)

CURRENCY_ACTIONS = (
    action(
        "mint", "Mint", ActionCategory.CURRENCY, AA,
        "currency_init_actions::add_mint_spec", "currency::do_mint",
        "account_actions::currency::CurrencyMint",
        params=(p("amount", T.U64, "Amount to mint"),), slots=COIN, shape=OUTCOME_STANDARD,
        description="Mint new coins with the locked treasury cap",
    ),
    action(
        "burn", "Burn", ActionCategory.CURRENCY, AA,
        "currency_init_actions::add_burn_spec", "currency::do_burn",
        "account_actions::currency::CurrencyBurn",
        params=(p("amount", T.U64, "Amount to burn"),), slots=COIN, shape=OUTCOME_STANDARD,
        description="Burn coins",
    ),
    action(
        "return_treasury_cap", "Return Treasury Cap", ActionCategory.CURRENCY, AA,
        "currency_init_actions::add_return_treasury_cap_spec", "currency::do_init_remove_treasury_cap",
        "account_actions::currency::RemoveTreasuryCap",
        params=(p("recipient", T.ADDRESS, "Receiver of the treasury cap"),),
        slots=COIN, contexts=LAUNCHPAD,
        description="Hand the treasury cap back to the raise creator",
    ),
    action(
        "return_metadata", "Return Metadata", ActionCategory.CURRENCY, AA,
        "currency_init_actions::add_return_metadata_spec", "currency::do_init_remove_metadata",
        "account_actions::currency::RemoveMetadata",
        params=(p("recipient", T.ADDRESS, "Receiver of the coin metadata"),),
        slots=(TypeSlot.KEY_TYPE, TypeSlot.COIN_TYPE), contexts=LAUNCHPAD, shape=ACCOUNT_METADATA,
        description="Hand the coin metadata back to the raise creator",
    ),
    action(
        "disable_currency", "Disable Currency Permissions", ActionCategory.CURRENCY, AA,
        "currency_init_actions::add_disable_spec", "currency::do_disable",
        "account_actions::currency::CurrencyDisable",
        params=(
            p("mint", T.BOOL, "Disable minting"),
            p("burn", T.BOOL, "Disable burning"),
            p("update_symbol", T.BOOL, "Disable symbol updates"),
            p("update_name", T.BOOL, "Disable name updates"),
            p("update_description", T.BOOL, "Disable description updates"),
            p("update_icon", T.BOOL, "Disable icon updates"),
        ),
        slots=COIN, contexts=PROPOSAL, shape=OUTCOME_STANDARD,
        description="Permanently disable currency permissions",
    ),
    action(
        "update_currency", "Update Currency Metadata", ActionCategory.CURRENCY, AA,
        "currency_init_actions::add_update_spec", "currency::do_update",
        "account_actions::currency::CurrencyUpdate",
        params=(
            p("symbol", T.OPTION_BYTES, "New symbol (ASCII)"),
            p("name", T.OPTION_BYTES, "New name (UTF-8)"),
            p("description", T.OPTION_BYTES, "New description (UTF-8)"),
            p("icon_url", T.OPTION_BYTES, "New icon URL (ASCII)"),
        ),
        slots=COIN, contexts=PROPOSAL, shape=OUTCOME_STANDARD,
        description="Update coin metadata",
    ),
)

STREAM_ACTIONS = (
    action(
        "create_stream", "Create Stream", ActionCategory.STREAM, AA,
        "stream_init_actions::add_create_stream_spec", "vault::do_init_create_stream",
        "account_actions::vault::CreateStream",
        params=(
            VAULT_NAME,
            p("beneficiary", T.ADDRESS, "Stream recipient"),
            p("amount_per_iteration", T.U64, "Amount unlocked per iteration"),
            p("start_time", T.U64, "Start timestamp (ms)"),
            p("iterations_total", T.U64, "Number of iterations"),
            p("iteration_period_ms", T.U64, "Iteration length (ms)"),
            p("cliff_time", T.OPTION_U64, "Cliff timestamp (ms)"),
            p("claim_window_ms", T.OPTION_U64, "Use-or-lose claim window (ms)"),
            p("max_per_withdrawal", T.U64, "Withdrawal cap"),
        ),
        slots=COIN, shape=ACCOUNT_CLOCK_FIRST,
        description="Create an iteration-based vesting stream from a vault",
    ),
)

MEMO_ACTIONS = (
    action(
        "memo", "Emit Memo", ActionCategory.MEMO, AA,
        "memo_init_actions::add_emit_memo_spec", "memo::do_emit_memo",
        "account_actions::memo::Memo",
        params=(p("message", T.STRING, "Memo text"),), shape=ACCOUNT_MEMO,
        description="Emit a text memo event",
    ),
)

PACKAGE_UPGRADE_ACTIONS = (
    action(
        "upgrade_package", "Upgrade Package", ActionCategory.PACKAGE_UPGRADE, AA,
        "package_upgrade_init_actions::add_upgrade_spec", "package_upgrade::do_upgrade",
        "account_actions::package_upgrade::PackageUpgrade",
        params=(p("name", T.STRING, "Package name"), p("digest", T.BYTES, "Upgrade digest")),
        contexts=PROPOSAL, shape=OUTCOME_CLOCK_FIRST,
        description="Authorize a package upgrade",
    ),
    action(
        "commit_upgrade", "Commit Upgrade", ActionCategory.PACKAGE_UPGRADE, AA,
        "package_upgrade_init_actions::add_commit_spec", "package_upgrade::do_commit",
        "account_actions::package_upgrade::PackageCommit",
        params=(p("name", T.STRING, "Package name"),),
        contexts=PROPOSAL, shape=OUTCOME_STANDARD,
        description="Commit an authorized upgrade",
    ),
    action(
        "restrict_upgrade", "Restrict Upgrade", ActionCategory.PACKAGE_UPGRADE, AA,
        "package_upgrade_init_actions::add_restrict_spec", "package_upgrade::do_restrict",
        "account_actions::package_upgrade::PackageRestrict",
        params=(p("name", T.STRING, "Package name"), p("policy", T.U8, "New upgrade policy")),
        contexts=PROPOSAL, shape=OUTCOME_STANDARD,
        description="Tighten a package's upgrade policy",
    ),
    action(
        "create_commit_cap", "Create Commit Cap", ActionCategory.PACKAGE_UPGRADE, AA,
        "package_upgrade_init_actions::add_create_commit_cap_spec", "package_upgrade::do_create_commit_cap",
        "account_actions::package_upgrade::PackageCreateCommitCap",
        params=(
            p("name", T.STRING, "Package name"),
            p("recipient", T.ADDRESS, "Receiver of the commit cap"),
            p("new_reclaim_delay_ms", T.U64, "Reclaim delay (ms)"),
        ),
        contexts=PROPOSAL, shape=OUTCOME_STANDARD,
        description="Create and hand out an upgrade commit capability",
    ),
)

ACCESS_CONTROL_ACTIONS = (
    action(
        "borrow_access", "Borrow Access", ActionCategory.ACCESS_CONTROL, AA,
        "access_control_init_actions::add_borrow_spec", "access_control::do_borrow",
        "account_actions::access_control::Borrow",
        slots=CAP, contexts=PROPOSAL,
        description="Borrow a capability held by the account",
    ),
    action(
        "return_access", "Return Access", ActionCategory.ACCESS_CONTROL, AA,
        "access_control_init_actions::add_return_spec", "access_control::do_return",
        "account_actions::access_control::Return",
        slots=CAP, contexts=PROPOSAL,
        description="Return a borrowed capability",
    ),
)

# =============================================================================
# FUTARCHY ACTIONS
# =============================================================================


def config_action(
    id: str,
    display_name: str,
    staging_function: str,
    execution_function: str,
    marker: str,
    params: tuple[ParamDef, ...],
    contexts: frozenset[IntentContext] = PROPOSAL,
    description: str = "",
) -> ActionDefinition:
    return action(
        id, display_name, ActionCategory.CONFIG, FA,
        f"futarchy_config_init_actions::{staging_function}", f"config_actions::{execution_function}",
        f"futarchy_actions::config_actions::{marker}",
        params=params, contexts=contexts, shape=OUTCOME_CLOCK_LAST, description=description,
    )


CONFIG_ACTIONS = (
    config_action(
        "set_proposals_enabled", "Set Proposals Enabled",
        "add_set_proposals_enabled_spec", "do_set_proposals_enabled", "SetProposalsEnabled",
        (p("enabled", T.BOOL, "Accept new proposals"),),
        description="Enable or disable proposal creation",
    ),
    config_action(
        "terminate_dao", "Terminate DAO",
        "add_terminate_dao_spec", "do_terminate_dao", "TerminateDao",
        (
            p("reason", T.STRING, "Termination reason"),
            p("dissolution_unlock_delay_ms", T.U64, "Delay before dissolution unlocks"),
        ),
        description="Permanently terminate the DAO",
    ),
    config_action(
        "update_dao_name", "Update DAO Name",
        "add_update_name_spec", "do_update_name", "UpdateName",
        (p("new_name", T.STRING, "New DAO name"),),
        description="Rename the DAO",
    ),
    config_action(
        "update_trading_params", "Update Trading Parameters",
        "add_update_trading_params_spec", "do_update_trading_params", "TradingParamsUpdate",
        (
            p("min_asset_amount", T.OPTION_U64, "Minimum asset liquidity"),
            p("min_stable_amount", T.OPTION_U64, "Minimum stable liquidity"),
            p("review_period_ms", T.OPTION_U64, "Review period (ms)"),
            p("trading_period_ms", T.OPTION_U64, "Trading period (ms)"),
            p("amm_total_fee_bps", T.OPTION_U64, "AMM fee (bps)"),
        ),
        contexts=BOTH,
        description="Update market trading parameters",
    ),
    config_action(
        "update_dao_metadata", "Update DAO Metadata",
        "add_update_metadata_spec", "do_update_metadata", "MetadataUpdate",
        (
            p("dao_name", T.OPTION_STRING, "New name"),
            p("icon_url", T.OPTION_STRING, "New icon URL"),
            p("description", T.OPTION_STRING, "New description"),
        ),
        description="Update DAO name, icon and description",
    ),
    config_action(
        "update_twap_config", "Update TWAP Config",
        "add_update_twap_config_spec", "do_update_twap_config", "TwapConfigUpdate",
        (
            p("start_delay", T.OPTION_U64, "TWAP start delay (ms)"),
            p("step_max", T.OPTION_U64, "Maximum TWAP step"),
            p("initial_observation", T.OPTION_U128, "Initial TWAP observation"),
            p("threshold", T.OPTION_SIGNED_U128, "Pass threshold"),
        ),
        contexts=BOTH,
        description="Update TWAP oracle configuration",
    ),
    config_action(
        "update_governance", "Update Governance",
        "add_update_governance_spec", "do_update_governance", "GovernanceUpdate",
        (
            p("max_outcomes", T.OPTION_U64, "Maximum outcomes per proposal"),
            p("max_actions_per_outcome", T.OPTION_U64, "Maximum actions per outcome"),
            p("required_bond_amount", T.OPTION_U64, "Proposal bond"),
            p("max_intents_per_outcome", T.OPTION_U64, "Maximum intents per outcome"),
            p("proposal_intent_expiry_ms", T.OPTION_U64, "Intent expiry (ms)"),
            p("optimistic_challenge_fee", T.OPTION_U64, "Optimistic challenge fee"),
            p("optimistic_challenge_period_ms", T.OPTION_U64, "Optimistic challenge period (ms)"),
            p("proposal_creation_fee", T.OPTION_U64, "Proposal creation fee"),
            p("proposal_fee_per_outcome", T.OPTION_U64, "Fee per outcome"),
            p("fee_in_asset_token", T.OPTION_BOOL, "Charge fees in the asset token"),
            p("accept_new_proposals", T.OPTION_BOOL, "Accept new proposals"),
            p("enable_premarket_reservation_lock", T.OPTION_BOOL, "Premarket reservation lock"),
            p("show_proposal_details", T.OPTION_BOOL, "Show proposal details"),
        ),
        description="Update governance parameters",
    ),
    config_action(
        "update_metadata_table", "Update Metadata Table",
        "add_update_metadata_table_spec", "do_update_metadata_table", "MetadataTableUpdate",
        (
            p("keys", T.STRING_VECTOR, "Keys to set"),
            p("values", T.STRING_VECTOR, "Values to set"),
            p("keys_to_remove", T.STRING_VECTOR, "Keys to delete"),
        ),
        description="Set and delete DAO metadata entries",
    ),
    config_action(
        "update_conditional_metadata", "Update Conditional Metadata",
        "add_update_conditional_metadata_spec", "do_update_conditional_metadata",
        "UpdateConditionalMetadata",
        (
            p("use_outcome_index", T.OPTION_BOOL, "Use outcome index in coin names"),
            p("conditional_metadata", T.CONDITIONAL_METADATA, "Conditional coin metadata", optional=True),
        ),
        description="Update conditional coin metadata",
    ),
    config_action(
        "update_sponsorship_config", "Update Sponsorship Config",
        "add_update_sponsorship_config_spec", "do_update_sponsorship_config", "SponsorshipConfigUpdate",
        (
            p("enabled", T.OPTION_BOOL, "Sponsorship enabled"),
            p("sponsored_threshold", T.OPTION_SIGNED_U128, "Sponsored threshold"),
            p("waive_advancement_fees", T.OPTION_BOOL, "Waive advancement fees"),
            p("default_sponsor_quota_amount", T.OPTION_U64, "Default sponsor quota"),
        ),
        description="Update proposal sponsorship configuration",
    ),
)

QUOTA_ACTIONS = (
    action(
        "set_quotas", "Set Quotas", ActionCategory.QUOTA, FA,
        "quota_init_actions::add_set_quotas_spec", "quota_actions::do_set_quotas",
        "futarchy_actions::quota_actions::SetQuotas",
        params=(
            p("users", T.ADDRESS_VECTOR, "Addresses receiving the quota"),
            p("quota_amount", T.U64, "Proposals per period"),
            p("quota_period_ms", T.U64, "Quota period (ms)"),
            p("reduced_fee", T.U64, "Reduced proposal fee"),
            p("sponsor_quota_amount", T.U64, "Sponsorships per period"),
        ),
        contexts=PROPOSAL, shape=OUTCOME_CLOCK_LAST,
        description="Grant proposal quotas to addresses",
    ),
)

LIQUIDITY_ACTIONS = (
    action(
        "create_pool_with_mint", "Create Pool with Mint", ActionCategory.LIQUIDITY, FA,
        "liquidity_init_actions::add_create_pool_with_mint_spec",
        "liquidity_init_actions::do_init_create_pool_with_mint",
        "futarchy_actions::liquidity_init_actions::CreatePoolWithMint",
        params=(
            VAULT_NAME,
            p("asset_amount", T.U64, "Asset tokens to mint into the pool"),
            p("stable_amount", T.U64, "Stable tokens taken from the vault"),
            p("fee_bps", T.U64, "Pool fee (bps)"),
            p("launch_fee_duration_ms", T.U64, "Launch fee window (ms)"),
        ),
        slots=PAIR, contexts=LAUNCHPAD, shape=ACCOUNT_POOL,
        extras=(
            p("lp_type", T.STRING, "LP coin type"),
            p("lp_treasury_cap_id", T.ID, "LP treasury cap object"),
            p("lp_metadata_id", T.ID, "LP metadata object"),
        ),
        description="Create the spot AMM pool, minting the asset side",
    ),
    action(
        "add_liquidity", "Add Liquidity", ActionCategory.LIQUIDITY, FA,
        "liquidity_actions::add_add_liquidity_spec", "liquidity_actions::do_add_liquidity",
        "futarchy_actions::liquidity_actions::AddLiquidity",
        params=(
            p("asset_vault_name", T.STRING, "Vault supplying the asset side"),
            p("stable_vault_name", T.STRING, "Vault supplying the stable side"),
            p("asset_amount", T.U64, "Asset amount"),
            p("stable_amount", T.U64, "Stable amount"),
            p("min_lp_tokens", T.U64, "Minimum LP tokens out"),
        ),
        slots=PAIR, contexts=PROPOSAL,
        description="Add liquidity to the spot pool from treasury vaults",
    ),
    action(
        "remove_liquidity", "Remove Liquidity", ActionCategory.LIQUIDITY, FA,
        "liquidity_actions::add_remove_liquidity_spec", "liquidity_actions::do_remove_liquidity",
        "futarchy_actions::liquidity_actions::RemoveLiquidity",
        params=(
            p("lp_amount", T.U64, "LP tokens to burn"),
            p("min_asset_out", T.U64, "Minimum asset out"),
            p("min_stable_out", T.U64, "Minimum stable out"),
            p("asset_vault_name", T.STRING, "Vault receiving the asset side"),
            p("stable_vault_name", T.STRING, "Vault receiving the stable side"),
        ),
        slots=PAIR, contexts=PROPOSAL,
        description="Remove liquidity from the spot pool into treasury vaults",
    ),
    action(
        "swap", "Swap", ActionCategory.LIQUIDITY, FA,
        "liquidity_actions::add_swap_spec", "liquidity_actions::do_swap",
        "futarchy_actions::liquidity_actions::Swap",
        params=(
            p("amount_in", T.U64, "Input amount"),
            p("min_amount_out", T.U64, "Minimum output"),
            p("is_asset_to_stable", T.BOOL, "Swap direction"),
            p("input_vault_name", T.STRING, "Vault supplying the input"),
            p("output_vault_name", T.STRING, "Vault receiving the output"),
        ),
        slots=PAIR, contexts=PROPOSAL,
        description="Swap through the spot pool using treasury funds",
    ),
)

DISSOLUTION_ACTIONS = (
    action(
        "create_dissolution_capability", "Create Dissolution Capability", ActionCategory.DISSOLUTION, FA,
        "dissolution_init_actions::add_create_dissolution_capability_spec",
        "dissolution_actions::do_create_dissolution_capability",
        "futarchy_actions::dissolution_actions::CreateDissolutionCapability",
        slots=(TypeSlot.ASSET_TYPE,), contexts=PROPOSAL, shape=LEADING_CLOCK_LAST,
        description="Create the capability holders use to redeem after termination",
    ),
)

# =============================================================================
# GOVERNANCE ACTIONS
# =============================================================================


def registry_action(id: str, display_name: str, marker: str, params: tuple[ParamDef, ...] = (),
                    description: str = "") -> ActionDefinition:
    return action(
        id, display_name, ActionCategory.PACKAGE_REGISTRY, FGA,
        f"package_registry_init_actions::add_{id}_spec", f"package_registry_actions::do_{id}",
        f"futarchy_governance_actions::package_registry_actions::{marker}",
        params=params, contexts=PROPOSAL, shape=OUTCOME_CLOCK_LAST,
        capability=PACKAGE_ADMIN_CAP, description=description,
    )


PACKAGE_REGISTRY_ACTIONS = (
    registry_action(
        "add_package", "Add Package", "AddPackage",
        (
            p("name", T.STRING, "Package name"),
            p("addr", T.ADDRESS, "Package address"),
            p("version", T.U64, "Package version"),
            p("action_types", T.STRING_VECTOR, "Action types the package provides"),
            p("category", T.STRING, "Package category"),
            p("description", T.STRING, "Package description"),
        ),
        description="Register a package with the protocol",
    ),
    registry_action(
        "remove_package", "Remove Package", "RemovePackage",
        (p("name", T.STRING, "Package name"),),
        description="Remove a package from the registry",
    ),
    registry_action(
        "update_package_version", "Update Package Version", "UpdatePackageVersion",
        (
            p("name", T.STRING, "Package name"),
            p("addr", T.ADDRESS, "New package address"),
            p("version", T.U64, "New version"),
        ),
        description="Record a new package version",
    ),
    registry_action(
        "update_package_metadata", "Update Package Metadata", "UpdatePackageMetadata",
        (
            p("name", T.STRING, "Package name"),
            p("new_action_types", T.STRING_VECTOR, "New action types"),
            p("new_category", T.STRING, "New category"),
            p("new_description", T.STRING, "New description"),
        ),
        description="Update registry metadata for a package",
    ),
    registry_action(
        "pause_account_creation", "Pause Account Creation", "PauseAccountCreation",
        description="Pause creation of new accounts",
    ),
    registry_action(
        "unpause_account_creation", "Unpause Account Creation", "UnpauseAccountCreation",
        description="Resume creation of new accounts",
    ),
)


def admin_action(id: str, display_name: str, marker: str, capability: CapabilityUse, *,
                 params: tuple[ParamDef, ...] = (), slots: tuple[TypeSlot, ...] = (),
                 shape: ExecutionShape = OUTCOME_CLOCK_LAST, description: str = "") -> ActionDefinition:
    return action(
        id, display_name, ActionCategory.PROTOCOL_ADMIN, FGA,
        f"protocol_admin_init_actions::add_{id}_spec", f"protocol_admin_actions::do_{id}",
        f"futarchy_governance_actions::protocol_admin_actions::{marker}",
        params=params, slots=slots, contexts=PROPOSAL, shape=shape,
        capability=capability, description=description,
    )


# Admin execution calls take the account, registry and clock only. The
# factory and fee manager objects are not passed; the borrowed capability
# authorizes the call.
PROTOCOL_ADMIN_ACTIONS = (
    admin_action(
        "set_factory_paused", "Set Factory Paused", "SetFactoryPaused", FACTORY_OWNER_CAP,
        params=(p("paused", T.BOOL, "Pause the factory"),),
        description="Pause or resume DAO creation",
    ),
    admin_action(
        "disable_factory_permanently", "Disable Factory Permanently", "DisableFactoryPermanently",
        FACTORY_OWNER_CAP,
        description="Permanently disable DAO creation",
    ),
    admin_action(
        "add_stable_type", "Add Stable Type", "AddStableType", FACTORY_OWNER_CAP,
        slots=STABLE, shape=OUTCOME_TRAILING_CLOCK_LAST,
        description="Allow a stable coin type for new DAOs",
    ),
    admin_action(
        "remove_stable_type", "Remove Stable Type", "RemoveStableType", FACTORY_OWNER_CAP,
        slots=STABLE, shape=OUTCOME_TRAILING_CLOCK_LAST,
        description="Disallow a stable coin type for new DAOs",
    ),
    admin_action(
        "update_dao_creation_fee", "Update DAO Creation Fee", "UpdateDaoCreationFee", FEE_ADMIN_CAP,
        params=(p("new_fee", T.U64, "New DAO creation fee"),),
    ),
    admin_action(
        "update_proposal_fee", "Update Proposal Fee", "UpdateProposalFee", FEE_ADMIN_CAP,
        params=(p("new_fee_per_outcome", T.U64, "New fee per outcome"),),
    ),
    admin_action(
        "update_verification_fee", "Update Verification Fee", "UpdateVerificationFee", FEE_ADMIN_CAP,
        params=(p("level", T.U8, "Verification level"), p("new_fee", T.U64, "New fee")),
    ),
    admin_action(
        "add_verification_level", "Add Verification Level", "AddVerificationLevel", VALIDATOR_ADMIN_CAP,
        params=(p("level", T.U8, "Verification level"), p("fee", T.U64, "Verification fee")),
    ),
    admin_action(
        "remove_verification_level", "Remove Verification Level", "RemoveVerificationLevel",
        VALIDATOR_ADMIN_CAP,
        params=(p("level", T.U8, "Verification level"),),
    ),
    admin_action(
        "withdraw_fees_to_treasury", "Withdraw Fees to Treasury", "WithdrawFeesToTreasury", FEE_ADMIN_CAP,
        params=(VAULT_NAME, p("amount", T.U64, "Amount to withdraw")),
        slots=COIN, shape=ACCOUNT_CLOCK_LAST,
        description="Move collected protocol fees into a treasury vault",
    ),
    admin_action(
        "add_coin_fee_config", "Add Coin Fee Config", "AddCoinFeeConfig", FEE_ADMIN_CAP,
        params=(
            p("decimals", T.U8, "Coin decimals"),
            p("dao_creation_fee", T.U64, "DAO creation fee in this coin"),
            p("proposal_fee_per_outcome", T.U64, "Proposal fee per outcome in this coin"),
        ),
        slots=STABLE, shape=OUTCOME_TRAILING_CLOCK_LAST,
    ),
    admin_action(
        "update_coin_creation_fee", "Update Coin Creation Fee", "UpdateCoinCreationFee", FEE_ADMIN_CAP,
        params=(p("new_fee", T.U64, "New creation fee"),),
        slots=STABLE, shape=OUTCOME_TRAILING_CLOCK_LAST,
    ),
    admin_action(
        "update_coin_proposal_fee", "Update Coin Proposal Fee", "UpdateCoinProposalFee", FEE_ADMIN_CAP,
        params=(p("new_fee_per_outcome", T.U64, "New fee per outcome"),),
        slots=STABLE, shape=OUTCOME_TRAILING_CLOCK_LAST,
    ),
    admin_action(
        "apply_pending_coin_fees", "Apply Pending Coin Fees", "ApplyPendingCoinFees", FEE_ADMIN_CAP,
        slots=STABLE, shape=OUTCOME_TRAILING_CLOCK_LAST,
        description="Apply fee changes whose delay has elapsed",
    ),
)

ORACLE_ACTIONS = (
    action(
        "create_oracle_grant", "Create Oracle Grant", ActionCategory.ORACLE, FO,
        "oracle_init_actions::add_create_oracle_grant_spec", "oracle_actions::do_create_oracle_grant",
        "futarchy_oracle::oracle_actions::CreateOracleGrant",
        params=(
            p("tier_specs", T.TIER_SPECS, "Price tiers with recipients"),
            p("use_relative_pricing", T.BOOL, "Thresholds relative to launch price"),
            p("launchpad_multiplier", T.U64, "Launch price multiplier"),
            p("earliest_execution_offset_ms", T.U64, "Earliest execution offset (ms)"),
            p("expiry_years", T.U64, "Grant lifetime (years)"),
            p("cancelable", T.BOOL, "Grant can be cancelled"),
            p("description", T.STRING, "Grant description"),
        ),
        slots=PAIR, shape=LEADING_CLOCK_LAST,
        description="Create a price-triggered mint grant",
    ),
    action(
        "cancel_oracle_grant", "Cancel Oracle Grant", ActionCategory.ORACLE, FO,
        "oracle_init_actions::add_cancel_grant_spec", "oracle_actions::do_cancel_grant",
        "futarchy_oracle::oracle_actions::CancelGrant",
        params=(p("grant_id", T.ID, "Grant to cancel"),),
        slots=PAIR, contexts=PROPOSAL, shape=LEADING_CLOCK_LAST,
        description="Cancel a cancelable oracle grant",
    ),
)

ALL_ACTIONS: tuple[ActionDefinition, ...] = (
    *TRANSFER_ACTIONS,
    *VAULT_ACTIONS,
    *CURRENCY_ACTIONS,
    *STREAM_ACTIONS,
    *MEMO_ACTIONS,
    *PACKAGE_UPGRADE_ACTIONS,
    *ACCESS_CONTROL_ACTIONS,
    *CONFIG_ACTIONS,
    *QUOTA_ACTIONS,
    *LIQUIDITY_ACTIONS,
    *DISSOLUTION_ACTIONS,
    *PACKAGE_REGISTRY_ACTIONS,
    *PROTOCOL_ADMIN_ACTIONS,
    *ORACLE_ACTIONS,
)

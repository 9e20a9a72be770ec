"""Indexer client: launchpad and proposal records with their staged actions.

The backend wraps payloads as ``{"data": {...}}``; older endpoints return
the record directly. Both are accepted.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from intent_spine.core.errors import IndexerError
from intent_spine.core.logging import get_logger
from intent_spine.core.settings import IntentSettings, get_settings

logger = get_logger(__name__)


class LaunchpadRecord(BaseModel):
    """Indexed raise. Actions stay raw; the converter parses them one by one."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "raise_id", "raiseId"))
    account_id: str | None = Field(
        default=None, validation_alias=AliasChoices("account_id", "accountId", "dao_id", "daoId"),
    )
    asset_type: str = Field(validation_alias=AliasChoices("asset_type", "assetType"))
    stable_type: str = Field(validation_alias=AliasChoices("stable_type", "stableType"))
    state: str | None = None
    success_actions: list[dict[str, Any]] = Field(
        default_factory=list, validation_alias=AliasChoices("success_actions", "successActions"),
    )
    failure_actions: list[dict[str, Any]] = Field(
        default_factory=list, validation_alias=AliasChoices("failure_actions", "failureActions"),
    )


class ProposalRecord(BaseModel):
    """Indexed proposal. ``staged_actions`` is keyed by outcome index as a string."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "proposal_id", "proposalId"))
    account_id: str | None = Field(
        default=None, validation_alias=AliasChoices("account_id", "accountId", "dao_id", "daoId"),
    )
    asset_type: str = Field(validation_alias=AliasChoices("asset_type", "assetType"))
    stable_type: str = Field(validation_alias=AliasChoices("stable_type", "stableType"))
    lp_type: str | None = Field(default=None, validation_alias=AliasChoices("lp_type", "lpType"))
    escrow_id: str | None = Field(default=None, validation_alias=AliasChoices("escrow_id", "escrowId"))
    spot_pool_id: str | None = Field(default=None, validation_alias=AliasChoices("spot_pool_id", "spotPoolId"))
    winning_outcome: int | None = Field(
        default=None, validation_alias=AliasChoices("winning_outcome", "winningOutcome"),
    )
    staged_actions: dict[str, list[dict[str, Any]]] = Field(
        default_factory=dict, validation_alias=AliasChoices("staged_actions", "stagedActions"),
    )

    def actions_for(self, outcome: int) -> list[dict[str, Any]]:
        return self.staged_actions.get(str(outcome), [])


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


class IndexerClient:
    """
    Async client for the indexing backend.

    Use as an async context manager, or call ``aclose()`` when done.

    Example:
        >>> async with IndexerClient("https://indexer.example") as indexer:
        ...     record = await indexer.get_proposal(proposal_id)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: IntentSettings | None = None, **kwargs: Any) -> IndexerClient:
        settings = settings or get_settings()
        return cls(settings.indexer_url, timeout=settings.indexer_timeout_s, **kwargs)

    async def __aenter__(self) -> IndexerClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str) -> Any:
        """GET ``path`` and return the unwrapped JSON payload.

        Raises:
            IndexerError: Transport failure, non-2xx status, or a body that is not JSON
        """
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.get(path)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("indexer.http_error", url=url, status=status)
            raise IndexerError(f"Indexer returned {status} for {path}", url=url, http_status=status, cause=e) from e
        except httpx.HTTPError as e:
            logger.warning("indexer.transport_error", url=url, error=str(e))
            raise IndexerError(f"Indexer request failed for {path}: {e}", url=url, cause=e) from e
        try:
            payload = resp.json()
        except ValueError as e:
            raise IndexerError(
                f"Indexer returned a non-JSON body for {path}", url=url, http_status=resp.status_code,
                retryable=False, cause=e,
            ) from e
        logger.debug("indexer.fetched", url=url)
        return _unwrap(payload)

    async def get_launchpad(self, raise_id: str) -> LaunchpadRecord:
        path = f"/launchpads/{raise_id}"
        return self._record(LaunchpadRecord, await self.get_json(path), path)

    async def get_proposal(self, proposal_id: str) -> ProposalRecord:
        path = f"/proposals/{proposal_id}"
        return self._record(ProposalRecord, await self.get_json(path), path)

    def _record(self, model: type[BaseModel], payload: Any, path: str) -> Any:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            raise IndexerError(
                f"Indexer record at {path} is malformed: {e.error_count()} problem(s)",
                url=f"{self.base_url}{path}", retryable=False, cause=e,
            ) from e

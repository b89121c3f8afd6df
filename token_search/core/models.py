"""Pydantic data models for token search.

All data structures are immutable (frozen) after creation. Python
attributes are snake_case; the public JSON shape uses the camelCase
names consumed by the search front-end (``totalSupply``,
``totalSupplyFormatted``, ``contractAddress``).
"""

import re
from collections import Counter

from pydantic import BaseModel, Field, field_validator, model_validator

from .types import Address, LookupStatus, QueryKind, RawAmount, TokenSource

ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def is_address(value: str) -> bool:
    """Check whether value is 0x followed by 40 hex digits (any case)."""
    return bool(ADDRESS_PATTERN.fullmatch(value))


class TokenDescriptor(BaseModel):
    """A resolved ERC-20 token."""

    address: Address
    name: str
    symbol: str
    total_supply: RawAmount = Field(alias="totalSupply")
    decimals: int = Field(ge=0, le=255)
    total_supply_formatted: str = Field(alias="totalSupplyFormatted")
    source: TokenSource = TokenSource.BLOCKCHAIN

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("address")
    @classmethod
    def normalize_address(cls, v: str) -> str:
        """Addresses are always stored lowercase."""
        if not is_address(v):
            raise ValueError(f"not a hex address: {v!r}")
        return v.lower()

    @field_validator("total_supply")
    @classmethod
    def check_raw_amount(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError(f"total supply must be a decimal integer string: {v!r}")
        return v

    def with_source(self, source: TokenSource) -> "TokenDescriptor":
        """Return a copy tagged with a different provenance."""
        return self.model_copy(update={"source": source})

    def to_dict(self) -> dict:
        """JSON-ready dict using the public field names."""
        return self.model_dump(mode="json", by_alias=True)


class LookupResult(BaseModel):
    """Tagged outcome of reading one contract.

    ``token`` is set exactly when ``status`` is ``LookupStatus.OK``.
    """

    address: Address
    status: LookupStatus
    token: TokenDescriptor | None = None
    detail: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_token_matches_status(self) -> "LookupResult":
        if (self.token is not None) != (self.status == LookupStatus.OK):
            raise ValueError(f"token must be present iff status is ok (status={self.status.value})")
        return self

    @classmethod
    def ok(cls, token: TokenDescriptor) -> "LookupResult":
        return cls(address=token.address, status=LookupStatus.OK, token=token)

    @classmethod
    def not_found(cls, address: str, detail: str | None = None) -> "LookupResult":
        return cls(address=address.lower(), status=LookupStatus.NOT_FOUND, detail=detail)

    @classmethod
    def not_conforming(cls, address: str, detail: str | None = None) -> "LookupResult":
        return cls(address=address.lower(), status=LookupStatus.NOT_CONFORMING, detail=detail)

    @classmethod
    def upstream_error(cls, address: str, detail: str | None = None) -> "LookupResult":
        return cls(address=address.lower(), status=LookupStatus.UPSTREAM_ERROR, detail=detail)

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.OK


class IndexEntry(BaseModel):
    """One token contract tracked by the token index."""

    contract_address: str = Field(alias="contractAddress")

    # The index returns extra metadata (tokenName, symbol, ...) which is kept but unused
    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}


class SearchResult(BaseModel):
    """Full outcome of one resolve call, including per-candidate diagnostics."""

    query: str
    kind: QueryKind
    tokens: list[TokenDescriptor] = Field(default_factory=list)
    lookups: list[LookupResult] = Field(default_factory=list)
    candidates_count: int = 0
    index_error: str | None = None

    model_config = {"frozen": True}

    @property
    def status_counts(self) -> dict[LookupStatus, int]:
        """Number of lookups per outcome."""
        return dict(Counter(lookup.status for lookup in self.lookups))

    @property
    def degraded(self) -> bool:
        """True when an upstream failure may have hidden results."""
        return self.index_error is not None or any(
            lookup.status == LookupStatus.UPSTREAM_ERROR for lookup in self.lookups
        )

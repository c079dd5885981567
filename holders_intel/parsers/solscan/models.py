"""Pydantic models for Solscan Pro API v2 token markets / holders responses."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field

# Free-text fields a holder row may carry a label in
LABEL_FIELDS = (
    "label", "name", "type", "account_type",
    "owner_type", "owner_label", "owner_name", "tags", "labels",
)


class SolscanMarket(BaseModel):
    pool_address: str | None = None
    market_id: str | None = None
    lp_address: str | None = None
    program_id: str | None = None
    token_1: str | None = None
    token_2: str | None = None

    model_config = {"extra": "ignore"}

    @property
    def addresses(self) -> list[str]:
        return [a for a in (self.pool_address, self.market_id, self.lp_address) if a]


class SolscanHolder(BaseModel):
    address: str = ""
    owner: str | None = None
    owner_program: str | None = Field(
        default=None,
        validation_alias=AliasChoices("owner_program", "ownerProgram", "program_id"),
    )
    amount: float | None = None
    rank: int | None = None

    label: Any = None
    name: Any = None
    type: Any = None
    account_type: Any = None
    owner_type: Any = None
    owner_label: Any = None
    owner_name: Any = None
    tags: Any = None
    labels: Any = None

    model_config = {"extra": "ignore"}

    def label_texts(self) -> list[str]:
        """Every string found in the label fields, lower-cased.

        Fields may be strings, lists or nested objects depending on the API
        version; every string leaf is collected.
        """
        texts: list[str] = []
        for field_name in LABEL_FIELDS:
            _collect_text(getattr(self, field_name), texts)
        return texts


def _collect_text(value: Any, out: list[str]) -> None:
    if isinstance(value, str):
        if value.strip():
            out.append(value.strip().lower())
    elif isinstance(value, list):
        for item in value:
            _collect_text(item, out)
    elif isinstance(value, dict):
        for item in value.values():
            _collect_text(item, out)

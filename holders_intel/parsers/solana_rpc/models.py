"""Data models for Solana JSON-RPC token account responses."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class TokenAccountRecord:
    """One SPL token account holding the mint, as returned by getProgramAccounts."""

    token_account: str
    owner: str
    program_id: str  # token program owning the account (legacy or Token-2022)
    amount_raw: int
    decimals: int
    ui_amount: float


def parse_program_accounts(result: object, mint: str, program_id: str) -> list[TokenAccountRecord]:
    """Parse a jsonParsed getProgramAccounts result into non-zero token accounts.

    Accepts the plain list form and the ``withContext`` ``{"value": [...]}``
    form. Malformed entries and zero balances are skipped.
    """
    if isinstance(result, dict):
        result = result.get("value", [])
    if not isinstance(result, list):
        return []

    records: list[TokenAccountRecord] = []
    for item in result:
        if not isinstance(item, dict):
            continue
        account = item.get("account") or {}
        data = account.get("data") if isinstance(account, dict) else None
        parsed = data.get("parsed") if isinstance(data, dict) else None
        info = parsed.get("info") if isinstance(parsed, dict) else None
        if not isinstance(info, dict):
            continue
        if info.get("mint") and info["mint"] != mint:
            continue

        token_amount = info.get("tokenAmount") or {}
        try:
            amount_raw = int(token_amount.get("amount", 0) or 0)
            decimals = int(token_amount.get("decimals", 0) or 0)
        except (TypeError, ValueError):
            continue
        ui_amount = _ui_amount(token_amount, amount_raw, decimals)
        if not math.isfinite(ui_amount) or ui_amount <= 0:
            continue

        owner = info.get("owner")
        pubkey = item.get("pubkey")
        if not owner or not pubkey:
            continue

        records.append(TokenAccountRecord(
            token_account=pubkey,
            owner=owner,
            program_id=account.get("owner") or program_id,
            amount_raw=amount_raw,
            decimals=decimals,
            ui_amount=ui_amount,
        ))
    return records


def _ui_amount(token_amount: dict, amount_raw: int, decimals: int) -> float:
    for key in ("uiAmountString", "uiAmount"):
        value = token_amount.get(key)
        if value is None:
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(number):
            return number
    return amount_raw / (10 ** decimals) if decimals >= 0 else float(amount_raw)

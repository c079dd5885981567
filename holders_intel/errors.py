"""Exceptions shared across the holders report engine."""

import re

_KEY_PARAM_RE = re.compile(r"(api[-_]?key|token|key)=([^&]+)", re.IGNORECASE)


def redact_url(url: str) -> str:
    """Mask credentials in query strings so endpoints can be logged and returned."""
    return _KEY_PARAM_RE.sub(lambda m: f"{m.group(1)}=***", url)


class HoldersIntelError(Exception):
    pass


class FallbackExhausted(HoldersIntelError):
    """Every candidate in an ordered fallback chain failed."""

    def __init__(self, attempts: list[tuple[str, str]]) -> None:
        self.attempts = attempts
        tried = "; ".join(f"{label}: {reason}" for label, reason in attempts) or "no candidates"
        super().__init__(f"All sources failed ({tried})")


class LedgerFetchError(HoldersIntelError):
    """No RPC endpoint returned holder accounts for the mint.

    This is the only failure that aborts a report.
    """

    def __init__(self, token_mint: str, attempts: list[tuple[str, str]]) -> None:
        self.token_mint = token_mint
        self.attempts = attempts
        if attempts:
            tried = "; ".join(f"{label} -> {reason}" for label, reason in attempts)
        else:
            tried = "no RPC endpoints configured"
        super().__init__(f"No holder accounts found for {token_mint}: {tried}")

"""Tests for known-address lookup tables."""

import pytest

from holders_intel.parsers.known_addresses import (
    DEFAULT_TABLES,
    TABLES_VERSION,
    KnownAddressTables,
)

RAYDIUM_V4 = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
METEORA_DBC = "dbcij3LWUppWqq96dh6gJWwBifmcGfLSB5D4DuSMaqN"
PUMP_PROGRAM = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
PUMP_AMM = "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"


class TestKnownAddressTables:
    def test_default_version(self) -> None:
        assert DEFAULT_TABLES.version == TABLES_VERSION

    def test_program_label_dex_first(self) -> None:
        assert DEFAULT_TABLES.program_label(RAYDIUM_V4) == "Raydium V4"
        assert DEFAULT_TABLES.program_label(METEORA_DBC) == "Meteora DBC Bonding Curve"
        assert DEFAULT_TABLES.program_label("Unknown111") is None
        assert DEFAULT_TABLES.program_label(None) is None

    def test_pump_program_is_bonding_curve(self) -> None:
        assert DEFAULT_TABLES.program_label(PUMP_PROGRAM) == "Pump.fun Bonding Curve"
        assert DEFAULT_TABLES.is_bonding_curve(PUMP_PROGRAM) is True
        assert DEFAULT_TABLES.program_label(PUMP_AMM) == "Pump.fun AMM"
        assert DEFAULT_TABLES.is_bonding_curve(PUMP_AMM) is False

    def test_bonding_curve(self) -> None:
        assert DEFAULT_TABLES.is_bonding_curve(METEORA_DBC) is True
        assert DEFAULT_TABLES.is_bonding_curve(RAYDIUM_V4) is False
        assert DEFAULT_TABLES.is_bonding_curve(None) is False

    def test_pool_program_ids_union(self) -> None:
        ids = DEFAULT_TABLES.pool_program_ids
        assert RAYDIUM_V4 in ids
        assert METEORA_DBC in ids

    def test_tables_are_immutable(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_TABLES.dex_programs["X"] = "Y"  # type: ignore[index]
        with pytest.raises(AttributeError):
            DEFAULT_TABLES.version = "other"  # type: ignore[misc]

    def test_custom_tables_copy_input(self) -> None:
        source = {"ProgA": "Test DEX"}
        tables = KnownAddressTables(version="test", dex_programs=source)
        source["ProgB"] = "Later"
        assert tables.program_label("ProgA") == "Test DEX"
        assert tables.program_label("ProgB") is None

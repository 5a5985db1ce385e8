"""Tests for the chain-name table and runtime locations."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from runic import config
from runic.config import ChainNames, ConfigError


class TestChainNames:
    def test_defaults(self) -> None:
        names = ChainNames.default()

        assert names.name_for(1) == "mainnet"
        assert names.name_for(11155111) == "sepolia"
        assert names.name_for(31337) == "anvil"
        assert 8453 in names
        assert len(names) == len(config.DEFAULT_CHAIN_NAMES)

    def test_unknown_chain(self) -> None:
        names = ChainNames.default()
        assert names.name_for(5) == "chain-5"
        assert 5 not in names

    def test_reverse_lookup(self) -> None:
        names = ChainNames.default()
        assert names.id_for("base-sepolia") == 84532
        assert names.id_for("nowhere") is None

    def test_table_is_a_copy(self) -> None:
        source = {7: "seven"}
        names = ChainNames(source)
        source[7] = "changed"
        assert names.name_for(7) == "seven"

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        names = ChainNames.from_file(tmp_path / "chains.json")
        assert len(names) == len(ChainNames.default())

    def test_file_overrides_and_extends(self, tmp_path: Path) -> None:
        path = tmp_path / "chains.json"
        path.write_text(json.dumps({"31337": "local", "777": "devnet"}), encoding="utf-8")

        names = ChainNames.from_file(path)

        assert names.name_for(31337) == "local"
        assert names.name_for(777) == "devnet"
        assert names.name_for(1) == "mainnet"

    @pytest.mark.parametrize(
        "content",
        ["{broken", '["mainnet"]', '{"one": "mainnet"}'],
    )
    def test_bad_file(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "chains.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigError) as excinfo:
            ChainNames.from_file(path)
        assert excinfo.value.exit_code == 6


def test_runic_home_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RUNIC_HOME", str(tmp_path / "home"))
    assert config._runic_dir() == tmp_path / "home"

    monkeypatch.delenv("RUNIC_HOME")
    assert config._runic_dir() == Path.home() / ".runic"

"""Tests for broadcast scanning and deployment discovery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pytest

from runic.anamnesis import DeploymentScanner, discover_deployments, unconfigured_chains
from runic.anamnesis.scanner import ArtifactReadError, parse_chain_id, read_run_file
from runic.config import ChainNames

from .samples import (
    COUNTER_ADDRESS,
    ERC20_ABI,
    PROXY_ADDRESS,
    TOKEN_ADDRESS,
    creation,
    write_json,
)


def add_run(root: Path, chain_dir: str, transactions: list, script: str = "Deploy.s.sol") -> Path:
    return write_json(
        root / "broadcast" / script / chain_dir / "run-latest.json",
        {"transactions": transactions},
    )


class FakeSecrets:
    def __init__(self, urls: dict[str, str]) -> None:
        self.urls = urls

    def resolve_rpc_url(self, name: str) -> Optional[str]:
        return self.urls.get(name)

    def resolve_signing_key(self, name: str) -> Optional[str]:
        return None


class TestParseChainId:
    def test_numeric_directory(self, tmp_path: Path) -> None:
        assert parse_chain_id(tmp_path / "11155111" / "run-latest.json") == 11155111

    @pytest.mark.parametrize("dirname", ["mainnet", "-1", "１２", "31337a"])
    def test_rejects_non_numeric(self, tmp_path: Path, dirname: str) -> None:
        with pytest.raises(ArtifactReadError):
            parse_chain_id(tmp_path / dirname / "run-latest.json")


class TestReadRunFile:
    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "run-latest.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ArtifactReadError):
            read_run_file(path)

    def test_non_object_root(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "run-latest.json", [1, 2])
        with pytest.raises(ArtifactReadError):
            read_run_file(path)

    def test_missing_transactions(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "run-latest.json", {"chain": 1})
        assert read_run_file(path) == []


class TestScan:
    def test_project(self, project: Path) -> None:
        deployments, chain_ids = DeploymentScanner(project / "out").scan(project / "broadcast")

        assert [d.name for d in deployments] == ["Counter", "ERC1967Proxy", "Token"]
        assert chain_ids == [31337]

        counter, proxy, token = deployments
        assert counter.address == COUNTER_ADDRESS
        assert counter.callable_address == COUNTER_ADDRESS
        assert counter.network_name == "anvil"
        assert counter.abi_path == project / "out" / "Counter.sol" / "Counter.json"
        assert [f.name for f in counter.functions] == ["increment", "number", "setNumber"]
        assert counter.constructor_args is None

        assert proxy.abi_path == project / "out" / "ERC1967Proxy.json"
        assert proxy.functions == []
        assert proxy.constructor_args == [COUNTER_ADDRESS, "0x"]

        # CREATE2 deployments count too
        assert token.address == TOKEN_ADDRESS
        assert token.constructor_args == ["1000000"]
        assert token.tx_hash == "0x" + TOKEN_ADDRESS[2:].rjust(64, "0")

    def test_scan_does_not_link_proxies(self, project: Path) -> None:
        deployments, _ = DeploymentScanner(project / "out").scan(project / "broadcast")
        assert all(d.callable_address == d.address for d in deployments)

    def test_non_string_arguments_become_json(self, tmp_path: Path) -> None:
        add_run(tmp_path, "1", [creation("Vault", PROXY_ADDRESS, [5, True, ["a", 1], {"k": None}])])

        deployments, _ = DeploymentScanner(tmp_path / "out").scan(tmp_path / "broadcast")

        assert deployments[0].constructor_args == ["5", "true", '["a",1]', '{"k":null}']

    def test_missing_interface(self, tmp_path: Path) -> None:
        add_run(tmp_path, "1", [creation("Ghost", PROXY_ADDRESS)])

        (ghost,), _ = DeploymentScanner(tmp_path / "out").scan(tmp_path / "broadcast")

        assert ghost.abi_path is None
        assert ghost.functions == []
        assert ghost.network_name == "mainnet"

    def test_broken_interface_keeps_deployment(
        self, project: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_json(project / "out" / "Token.sol" / "Token.json", {"abi": {"not": "a list"}})

        with caplog.at_level(logging.WARNING, logger="runic.anamnesis.scanner"):
            deployments, _ = DeploymentScanner(project / "out").scan(project / "broadcast")

        token = deployments[-1]
        assert token.name == "Token"
        assert token.functions == []
        assert "Token.json" in caplog.text
        assert len(deployments[0].functions) == 3

    def test_bad_chain_directory_is_skipped(self, project: Path) -> None:
        add_run(project, "mainnet", [creation("Lost", PROXY_ADDRESS)])

        deployments, chain_ids = DeploymentScanner(project / "out").scan(project / "broadcast")

        assert "Lost" not in [d.name for d in deployments]
        assert len(deployments) == 3
        assert chain_ids == [31337]

    def test_malformed_run_file_is_skipped(self, project: Path) -> None:
        bad = project / "broadcast" / "Other.s.sol" / "1" / "run-latest.json"
        bad.parent.mkdir(parents=True)
        bad.write_text("[", encoding="utf-8")

        deployments, chain_ids = DeploymentScanner(project / "out").scan(project / "broadcast")

        assert len(deployments) == 3
        assert chain_ids == [31337]

    def test_invalid_address_is_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        add_run(
            tmp_path,
            "1",
            [creation("Short", "0x1234"), creation("Fine", TOKEN_ADDRESS), {"contractName": "NoAddress", "transactionType": "CREATE"}],
        )

        with caplog.at_level(logging.WARNING, logger="runic.anamnesis.scanner"):
            deployments, _ = DeploymentScanner(tmp_path / "out").scan(tmp_path / "broadcast")

        assert [d.name for d in deployments] == ["Fine"]
        assert "invalid address" in caplog.text

    def test_several_chains(self, project: Path) -> None:
        add_run(project, "11155111", [creation("Token", TOKEN_ADDRESS, ["5"])], script="Sepolia.s.sol")
        add_run(project, "1", [creation("Token", TOKEN_ADDRESS, ["5"])], script="Mainnet.s.sol")

        deployments, chain_ids = DeploymentScanner(project / "out").scan(project / "broadcast")

        assert chain_ids == [1, 31337, 11155111]
        networks = {d.network_name for d in deployments if d.name == "Token"}
        assert networks == {"mainnet", "anvil", "sepolia"}

    def test_custom_chain_names(self, tmp_path: Path) -> None:
        add_run(tmp_path, "777", [creation("Token", TOKEN_ADDRESS)])
        write_json(tmp_path / "out" / "Token.json", {"abi": ERC20_ABI})

        scanner = DeploymentScanner(tmp_path / "out", ChainNames({777: "devnet"}))
        (token,), _ = scanner.scan(tmp_path / "broadcast")

        assert token.network_name == "devnet"
        assert len(token.functions) == 3

    def test_unknown_chain_gets_fallback_name(self, tmp_path: Path) -> None:
        add_run(tmp_path, "424242", [creation("Token", TOKEN_ADDRESS)])

        (token,), _ = DeploymentScanner(tmp_path / "out").scan(tmp_path / "broadcast")

        assert token.network_name == "chain-424242"

    def test_missing_broadcast_directory(self, tmp_path: Path) -> None:
        assert DeploymentScanner(tmp_path / "out").scan(tmp_path / "nope") == ([], [])


def test_discover_links_proxies(project: Path) -> None:
    deployments, chain_ids = discover_deployments(project / "broadcast", project / "out")

    counter, proxy, token = deployments
    assert counter.callable_address == PROXY_ADDRESS
    assert counter.is_proxy
    assert proxy.name == "ERC1967Proxy_hidden"
    assert token.callable_address == TOKEN_ADDRESS
    assert chain_ids == [31337]


def test_unconfigured_chains() -> None:
    names = ChainNames.default()
    secrets = FakeSecrets({"anvil": "http://127.0.0.1:8545"})

    assert unconfigured_chains([1, 31337, 99], names, secrets) == [1, 99]
    assert unconfigured_chains([], names, secrets) == []

"""Tests for product CLI commands."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from palletcount.cli import cli

ADD_ARGS = [
    "product",
    "add",
    "BR-350",
    "Brahma Lata 350ml",
    "--units-per-pack",
    "12",
    "--packs-per-layer",
    "10",
    "--layers-per-pallet",
    "8",
]


@pytest.mark.usefixtures("_isolated_store")
class TestProductAdd:
    def test_add(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ADD_ARGS)
        assert result.exit_code == 0
        assert "OK" in result.output
        assert "960" in result.output

    def test_add_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", *ADD_ARGS])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["data"]["units_per_pallet"] == 960

    def test_missing_factor_option(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["product", "add", "X", "Y", "--units-per-pack", "1"])
        assert result.exit_code == 2

    def test_zero_factor(self, cli_runner: CliRunner) -> None:
        args = [*ADD_ARGS[:-1], "0"]
        result = cli_runner.invoke(cli, ["--json", *args])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["error"]["code"] == "INVALID_FACTOR"
        assert data["error"]["detail"]["field"] == "layers_per_pallet"

    def test_duplicate_code(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ARGS)
        result = cli_runner.invoke(cli, ADD_ARGS)
        assert result.exit_code == 1
        assert "already exists" in result.output


@pytest.mark.usefixtures("_isolated_store")
class TestProductQueries:
    def test_search(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ARGS)
        result = cli_runner.invoke(cli, ["--json", "product", "search", "brahma"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["data"]["count"] == 1
        assert data["data"]["items"][0]["code"] == "BR-350"

    def test_search_table(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ADD_ARGS)
        result = cli_runner.invoke(cli, ["product", "search", "lata"])
        assert result.exit_code == 0
        assert "Brahma Lata 350ml" in result.output

    def test_list_quiet_prints_ids(self, cli_runner: CliRunner) -> None:
        added = json.loads(cli_runner.invoke(cli, ["--json", *ADD_ARGS]).output)
        result = cli_runner.invoke(cli, ["-q", "product", "list"])
        assert result.exit_code == 0
        assert result.output.strip() == added["data"]["id"]

    def test_show(self, cli_runner: CliRunner) -> None:
        added = json.loads(cli_runner.invoke(cli, ["--json", *ADD_ARGS]).output)
        result = cli_runner.invoke(cli, ["product", "show", added["data"]["id"]])
        assert result.exit_code == 0
        assert "BR-350" in result.output

    def test_show_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["product", "show", "nope"])
        assert result.exit_code == 1
        assert "ERROR" in result.output

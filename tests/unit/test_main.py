"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

from tradeload.__main__ import EXIT_FAILURE, EXIT_OK, build_parser, main, overrides_from_args
from tradeload.config.loader import MANAGEMENT_KEY_ENV, MANAGEMENT_SIGNER_ENV, TRADER_KEY_ENV
from tradeload.errors import ProvisioningError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv(TRADER_KEY_ENV, raising=False)
    monkeypatch.delenv(MANAGEMENT_KEY_ENV, raising=False)
    monkeypatch.delenv(MANAGEMENT_SIGNER_ENV, raising=False)


@pytest.fixture
def key_files(tmp_path, rsa_private_pem):
    trader = tmp_path / "trader.pem"
    management = tmp_path / "applogic.pem"
    trader.write_text(rsa_private_pem)
    management.write_text(rsa_private_pem)
    return str(trader), str(management)


class TestArgumentParsing:
    """Test suite for option mapping."""

    def test_unset_options_are_none(self) -> None:
        args = build_parser().parse_args(["run"])

        overrides = overrides_from_args(args)

        assert overrides["traders"] is None
        assert overrides["volume"] == {"min": None, "max": None, "step": None}
        assert overrides["credentials"] == {"trader_key": None, "management_keys": None}

    def test_options_map_onto_config_tree(self) -> None:
        args = build_parser().parse_args([
            "run",
            "--root-url", "http://localhost:8000",
            "--currencies", "usd, btc,eth",
            "--markets", "btcusd",
            "--traders", "12",
            "--price-step", "0.05",
            "--management-key", "applogic=/keys/a.pem",
            "--management-key", "ops=/keys/b.pem",
        ])

        overrides = overrides_from_args(args)

        assert overrides["root_url"] == "http://localhost:8000"
        assert overrides["currencies"] == ["usd", "btc", "eth"]
        assert overrides["markets"] == ["btcusd"]
        assert overrides["traders"] == 12
        assert overrides["price"]["step"] == 0.05
        assert overrides["credentials"]["management_keys"] == {
            "applogic": "/keys/a.pem",
            "ops": "/keys/b.pem",
        }

    def test_malformed_management_key(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "--management-key", "no-separator"])

    def test_log_level_is_case_insensitive(self) -> None:
        args = build_parser().parse_args(["run", "--log-level", "debug"])

        assert args.log_level == "DEBUG"


class TestMain:
    """Test suite for main()."""

    def test_no_command_prints_help(self, capsys) -> None:
        assert main([]) == EXIT_FAILURE
        assert "usage" in capsys.readouterr().out

    def test_missing_keys_is_configuration_error(self) -> None:
        with patch("tradeload.__main__.LoadTestRunner") as runner_cls:
            assert main(["run"]) == EXIT_FAILURE
        runner_cls.assert_not_called()

    def test_missing_config_file(self, tmp_path) -> None:
        assert main(["run", "--config", str(tmp_path / "absent.yml")]) == EXIT_FAILURE

    def test_successful_run(self, key_files) -> None:
        trader_key, management_key = key_files

        with patch("tradeload.__main__.LoadTestRunner") as runner_cls:
            runner_cls.return_value.run.return_value.insufficient_data = False
            code = main([
                "run",
                "--trader-key", trader_key,
                "--management-key", f"applogic={management_key}",
                "--orders", "20",
                "--seed", "3",
            ])

        assert code == EXIT_OK
        params = runner_cls.call_args.args[0]
        assert params.orders == 20
        assert params.credentials.trader_key.startswith("-----BEGIN")
        assert set(params.credentials.management_keys) == {"applogic"}
        assert runner_cls.call_args.kwargs == {"seed": 3}

    def test_config_file_and_environment(self, tmp_path, key_files, monkeypatch) -> None:
        trader_key, management_key = key_files
        monkeypatch.setenv(TRADER_KEY_ENV, trader_key)
        monkeypatch.setenv(MANAGEMENT_KEY_ENV, management_key)
        config = tmp_path / "run.yml"
        config.write_text("traders: 3\nmarkets: [ethusd]\n")

        with patch("tradeload.__main__.LoadTestRunner") as runner_cls:
            runner_cls.return_value.run.return_value.insufficient_data = True
            code = main(["run", "--config", str(config), "--traders", "5"])

        assert code == EXIT_OK
        params = runner_cls.call_args.args[0]
        assert params.traders == 5
        assert params.markets == ("ethusd",)
        assert set(params.credentials.management_keys) == {"tradeload"}

    def test_provisioning_failure(self, key_files) -> None:
        trader_key, management_key = key_files

        with patch("tradeload.__main__.LoadTestRunner") as runner_cls:
            runner_cls.return_value.run.side_effect = ProvisioningError(
                "Trader creation failed for trader ID0000000001", trader_uid="ID0000000001"
            )
            code = main(["run", "--trader-key", trader_key,
                         "--management-key", f"applogic={management_key}"])

        assert code == EXIT_FAILURE


class TestValidateCommand:
    """Test suite for the validate subcommand."""

    def test_lists_every_problem(self, capsys) -> None:
        code = main(["validate", "--traders", "1", "--markets", ","])

        out = capsys.readouterr().out
        assert code == EXIT_FAILURE
        assert "traders: Must be an integer of at least 2" in out
        assert "markets:" in out
        assert "credentials.trader_key" in out

    def test_valid_parameters(self, key_files, capsys) -> None:
        trader_key, management_key = key_files

        with patch("tradeload.__main__.LoadTestRunner") as runner_cls:
            code = main(["validate", "--trader-key", trader_key,
                         "--management-key", f"applogic={management_key}"])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "Configuration is valid" in out
        assert "BEGIN" not in out
        runner_cls.assert_not_called()

    def test_missing_config_file(self, tmp_path, capsys) -> None:
        assert main(["validate", "--config", str(tmp_path / "absent.yml")]) == EXIT_FAILURE
        assert "Configuration file not found" in capsys.readouterr().out


class TestLoggingOptions:
    """Test suite for logging flags."""

    def test_log_flags_reach_configuration(self) -> None:
        with patch("tradeload.__main__.configure_logging") as configure:
            main(["validate", "--log-level", "warning", "--log-json", "--log-threads"])

        configure.assert_called_once_with(level="WARNING", format_json=True, include_thread=True)

    def test_thread_name_is_off_by_default(self) -> None:
        with patch("tradeload.__main__.configure_logging") as configure:
            main(["validate"])

        assert configure.call_args.kwargs["include_thread"] is False

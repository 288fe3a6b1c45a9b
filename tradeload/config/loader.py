"""Configuration loader with 3-tier parameter precedence."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import CredentialParams, GridRange, RunParameters, get_default_config
from .validation import ConfigValidator

TRADER_KEY_ENV = "TRADELOAD_TRADER_KEY"
MANAGEMENT_KEY_ENV = "TRADELOAD_MANAGEMENT_KEY"
MANAGEMENT_SIGNER_ENV = "TRADELOAD_MANAGEMENT_SIGNER"


@dataclass(frozen=True)
class ConfigLoader:
    """Builds validated RunParameters from defaults, a YAML file and overrides."""

    config_path: Optional[Path]
    defaults: dict[str, Any]
    environ: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[dict[str, str]] = None
    ) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        return cls(
            config_path=Path(config_path) if config_path else None,
            defaults=get_default_config(),
            environ=dict(os.environ if environ is None else environ),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load the YAML run configuration, if one was given."""
        if self.config_path is None:
            return {}

        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self.config_path}")
        return data

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides, e.g. command line options (highest priority)
        2. YAML configuration file
        3. Global defaults (lowest priority)
        """
        config = self._deep_merge(self.defaults, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, self._drop_unset(overrides))

        config["credentials"] = self._apply_environment(config.get("credentials") or {})
        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> RunParameters:
        """Merge, validate and freeze the run parameters."""
        config = self.merge_config(overrides)
        credentials = config.get("credentials")
        if isinstance(credentials, dict):
            config["credentials"] = self._resolve_key_material(credentials)

        errors = ConfigValidator.validate_config(config)
        if errors:
            details = "; ".join(f"{err.field}: {err.message} (got: {err.value!r})" for err in errors)
            raise ConfigurationError(f"Invalid run parameters: {details}", errors=errors)

        return self._build_parameters(config)

    def _apply_environment(self, credentials: dict[str, Any]) -> dict[str, Any]:
        """Fill missing key material from the environment."""
        result = dict(credentials)
        if not result.get("trader_key") and self.environ.get(TRADER_KEY_ENV):
            result["trader_key"] = self.environ[TRADER_KEY_ENV]
        if not result.get("management_keys") and self.environ.get(MANAGEMENT_KEY_ENV):
            signer = self.environ.get(MANAGEMENT_SIGNER_ENV, "tradeload")
            result["management_keys"] = {signer: self.environ[MANAGEMENT_KEY_ENV]}
        return result

    def _resolve_key_material(self, credentials: dict[str, Any]) -> dict[str, Any]:
        """Replace key file paths with their PEM contents."""
        result = dict(credentials)
        if isinstance(result.get("trader_key"), str):
            result["trader_key"] = self._read_key(result["trader_key"])
        keys = result.get("management_keys")
        if isinstance(keys, dict):
            result["management_keys"] = {
                name: self._read_key(value) if isinstance(value, str) else value
                for name, value in keys.items()
            }
        return result

    def _read_key(self, value: str) -> str:
        if "-----BEGIN" in value:
            return value
        path = Path(value).expanduser()
        try:
            if not path.is_file():
                return value
        except OSError:
            # Long inline secrets are not valid file names.
            return value
        try:
            return path.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read key file {path}: {e}") from e

    def _build_parameters(self, config: dict[str, Any]) -> RunParameters:
        cred = config["credentials"]
        defaults = CredentialParams()
        return RunParameters(
            root_url=config["root_url"].rstrip("/"),
            currencies=tuple(config["currencies"]),
            markets=tuple(config["markets"]),
            traders=config["traders"],
            orders=config["orders"],
            workers=config["workers"],
            volume=GridRange(**{k: config["volume"][k] for k in ("min", "max", "step")}),
            price=GridRange(**{k: config["price"][k] for k in ("min", "max", "step")}),
            credentials=CredentialParams(
                trader_key=cred["trader_key"],
                trader_algorithm=cred.get("trader_algorithm", defaults.trader_algorithm),
                management_keys=dict(cred["management_keys"]),
                management_algorithm=cred.get("management_algorithm", defaults.management_algorithm),
                issuer=cred.get("issuer", defaults.issuer),
                audience=cred.get("audience", defaults.audience),
                management_issuer=cred.get("management_issuer", defaults.management_issuer),
                token_ttl_seconds=cred.get("token_ttl_seconds", defaults.token_ttl_seconds),
            ),
            report_path=config.get("report_path"),
            funding_amount=config["funding_amount"],
            provisioning_workers=config.get("provisioning_workers", 1),
            email_domain=config.get("email_domain", "tradeload.test"),
            request_timeout_seconds=config.get("request_timeout_seconds"),
            progress_percent=config["progress_percent"],
            progress_cap=config["progress_cap"],
        )

    def _drop_unset(self, overrides: dict[str, Any]) -> dict[str, Any]:
        """Remove None leaves so unset options do not mask lower tiers."""
        result = {}
        for key, value in overrides.items():
            if isinstance(value, dict):
                nested = self._drop_unset(value)
                if nested:
                    result[key] = nested
            elif value is not None:
                result[key] = value
        return result

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

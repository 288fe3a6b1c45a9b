"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _usable_key(key: str, algorithm: Any) -> bool:
    # HMAC algorithms take any shared secret; the others need PEM key material.
    if isinstance(algorithm, str) and algorithm.upper().startswith("HS"):
        return True
    return "-----BEGIN" in key


class ConfigValidator:
    """Validates run configuration parameters."""

    @staticmethod
    def validate_endpoint(config: dict[str, Any]) -> list[ValidationError]:
        """Validate the root endpoint URL."""
        errors = []
        value = config.get("root_url")
        parsed = urlparse(value) if isinstance(value, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(ValidationError(
                field="root_url",
                message="Must be an http(s) URL",
                value=value
            ))
        return errors

    @staticmethod
    def validate_population(config: dict[str, Any]) -> list[ValidationError]:
        """Validate currencies, markets and the counts that size the run."""
        errors = []

        currencies = config.get("currencies")
        if (not isinstance(currencies, (list, tuple)) or len(currencies) < 2
                or not all(isinstance(c, str) and c for c in currencies)):
            errors.append(ValidationError(
                field="currencies",
                message="Must list at least 2 currency codes",
                value=currencies
            ))

        markets = config.get("markets")
        if (not isinstance(markets, (list, tuple)) or len(markets) < 1
                or not all(isinstance(m, str) and m for m in markets)):
            errors.append(ValidationError(
                field="markets",
                message="Must list at least 1 market code",
                value=markets
            ))

        value = config.get("traders")
        if not _is_int(value) or value < 2:
            errors.append(ValidationError(
                field="traders",
                message="Must be an integer of at least 2",
                value=value
            ))

        value = config.get("orders")
        if not _is_int(value) or value < 0:
            errors.append(ValidationError(
                field="orders",
                message="Must be a non-negative integer",
                value=value
            ))

        value = config.get("workers")
        if not _is_int(value) or value < 1:
            errors.append(ValidationError(
                field="workers",
                message="Must be a positive integer",
                value=value
            ))

        value = config.get("provisioning_workers", 1)
        if not _is_int(value) or value < 1:
            errors.append(ValidationError(
                field="provisioning_workers",
                message="Must be a positive integer",
                value=value
            ))

        return errors

    @staticmethod
    def validate_range(name: str, params: Any) -> list[ValidationError]:
        """Validate a min/max/step sampling range."""
        if not isinstance(params, dict):
            return [ValidationError(
                field=name,
                message="Must be a mapping with min, max and step",
                value=params
            )]

        errors = []
        for key in ("min", "max", "step"):
            value = params.get(key)
            if not _is_number(value):
                errors.append(ValidationError(
                    field=f"{name}.{key}",
                    message="Must be a number",
                    value=value
                ))
        if errors:
            return errors

        if params["step"] <= 0:
            errors.append(ValidationError(
                field=f"{name}.step",
                message="Must be a positive number",
                value=params["step"]
            ))
        if params["min"] > params["max"]:
            errors.append(ValidationError(
                field=f"{name}.min",
                message=f"Must not exceed {name}.max",
                value=params["min"]
            ))
        if params["min"] < 0:
            errors.append(ValidationError(
                field=f"{name}.min",
                message="Must be a non-negative number",
                value=params["min"]
            ))
        return errors

    @staticmethod
    def validate_credentials(params: Any) -> list[ValidationError]:
        """Validate that both token signers have key material."""
        if not isinstance(params, dict):
            return [ValidationError(
                field="credentials",
                message="Must be a mapping",
                value=params
            )]

        errors = []
        trader_key = params.get("trader_key")
        if not isinstance(trader_key, str) or not trader_key.strip():
            errors.append(ValidationError(
                field="credentials.trader_key",
                message="Trader signing key is required",
                value=None
            ))
        elif not _usable_key(trader_key, params.get("trader_algorithm", "RS256")):
            errors.append(ValidationError(
                field="credentials.trader_key",
                message="Must be a PEM private key or a readable key file",
                value="<redacted>"
            ))

        keys = params.get("management_keys")
        if (not isinstance(keys, dict) or not keys
                or not all(isinstance(v, str) and v.strip() for v in keys.values())):
            errors.append(ValidationError(
                field="credentials.management_keys",
                message="At least one named management signing key is required",
                value=sorted(keys) if isinstance(keys, dict) else keys
            ))
        else:
            algorithm = params.get("management_algorithm", "RS256")
            for name, key in keys.items():
                if not _usable_key(key, algorithm):
                    errors.append(ValidationError(
                        field=f"credentials.management_keys.{name}",
                        message="Must be a PEM private key or a readable key file",
                        value="<redacted>"
                    ))

        ttl = params.get("token_ttl_seconds", 60)
        if not _is_int(ttl) or ttl <= 0:
            errors.append(ValidationError(
                field="credentials.token_ttl_seconds",
                message="Must be a positive integer",
                value=ttl
            ))
        return errors

    @staticmethod
    def validate_tuning(config: dict[str, Any]) -> list[ValidationError]:
        """Validate funding, timeout and progress options."""
        errors = []

        value = config.get("funding_amount")
        if not _is_number(value) or value <= 0:
            errors.append(ValidationError(
                field="funding_amount",
                message="Must be a positive number",
                value=value
            ))

        value = config.get("request_timeout_seconds")
        if value is not None and (not _is_number(value) or value <= 0):
            errors.append(ValidationError(
                field="request_timeout_seconds",
                message="Must be a positive number or null",
                value=value
            ))

        value = config.get("progress_percent")
        if not _is_number(value) or value <= 0 or value > 1:
            errors.append(ValidationError(
                field="progress_percent",
                message="Must be a positive number between 0 and 1",
                value=value
            ))

        value = config.get("progress_cap")
        if not _is_int(value) or value < 1:
            errors.append(ValidationError(
                field="progress_cap",
                message="Must be a positive integer",
                value=value
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []
        errors.extend(ConfigValidator.validate_endpoint(config))
        errors.extend(ConfigValidator.validate_population(config))
        errors.extend(ConfigValidator.validate_range("volume", config.get("volume")))
        errors.extend(ConfigValidator.validate_range("price", config.get("price")))
        errors.extend(ConfigValidator.validate_credentials(config.get("credentials")))
        errors.extend(ConfigValidator.validate_tuning(config))
        return errors

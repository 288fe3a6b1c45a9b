"""
Run configuration: defaults, YAML loading and validation.
"""
from .defaults import CredentialParams, GridRange, RunParameters, get_default_config
from .loader import ConfigLoader
from .validation import ConfigValidator, ValidationError

__all__ = [
    "CredentialParams",
    "GridRange",
    "RunParameters",
    "get_default_config",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationError",
]

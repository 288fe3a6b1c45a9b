"""
Remote trading-engine API access: endpoints, token signers and client.
"""
from .auth import ManagementTokenSigner, TraderTokenSigner
from .client import ApiCallError, ApiResponse, TradingApiClient

__all__ = [
    "ManagementTokenSigner",
    "TraderTokenSigner",
    "ApiCallError",
    "ApiResponse",
    "TradingApiClient",
]

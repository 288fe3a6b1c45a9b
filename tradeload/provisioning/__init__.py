"""
Provisioning module: trader creation and funding before the load phase.
"""
from .traders import TraderProvisioner

__all__ = ["TraderProvisioner"]

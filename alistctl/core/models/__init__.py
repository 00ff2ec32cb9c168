"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from alistctl.core.models import AlistctlConfig, InstallTarget, ServiceUnit
"""

from alistctl.core.models.config import AlistctlConfig, DownloadSettings
from alistctl.core.models.install import (
    CliLinkage,
    Credential,
    InstallTarget,
    ServiceUnit,
)

__all__ = [
    # config.py
    "AlistctlConfig",
    "DownloadSettings",
    # install.py
    "CliLinkage",
    "Credential",
    "InstallTarget",
    "ServiceUnit",
]

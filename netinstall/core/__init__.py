"""
Core Layer - configuration, status and loading.

This package contains:
- Module configuration parsing (settings.py)
- Status and its user-facing messages (status.py)
- Failure taxonomy (errors.py)
- Source resolution (sources.py)
- Collaborator contracts (collaborators.py)
- The loader itself (config.py)
"""

from netinstall.core.config import NetInstallConfig
from netinstall.core.status import Status, status_message

__all__ = ["NetInstallConfig", "Status", "status_message"]

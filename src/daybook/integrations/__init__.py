"""Backend integrations.

  - ``DaybookClient`` -- REST implementation of ``DaybookBackend``
"""

from .api_client import DaybookClient

__all__ = ["DaybookClient"]

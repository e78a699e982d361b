from __future__ import annotations

from udf_proxy.config import Settings
from udf_proxy.main import create_app

__all__ = ["Settings", "create_app"]

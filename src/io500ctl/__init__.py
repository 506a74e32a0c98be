"""
io500ctl - Deploy DAOS in GCP, run IO500 repeatedly, collect results and clean up.
"""

__version__ = "0.1.0"

from .core.config import load_settings
from .core.options import parse_options
from .core.schema import ClusterSettings, RunConfiguration

__all__ = [
    "load_settings",
    "parse_options",
    "ClusterSettings",
    "RunConfiguration",
]

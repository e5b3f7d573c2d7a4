"""
Utility modules for the ITURHFProp prediction service.
"""

from .logging_config import get_logger, setup_logging
from .serialization import safe_json_serialize

__all__ = [
    'get_logger',
    'setup_logging',
    'safe_json_serialize'
]

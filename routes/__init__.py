"""
Route modules for the ITURHFProp prediction service.
"""

from .api import api_bp

__all__ = [
    'api_bp'
]

"""
JSON helpers for API responses.
"""

import math


def safe_json_serialize(obj):
    """Make an object JSON-safe: NaN and infinities become None."""
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    elif isinstance(obj, dict):
        return {key: safe_json_serialize(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [safe_json_serialize(item) for item in obj]
    elif isinstance(obj, (int, str, bool, type(None))):
        return obj
    else:
        # Convert other types to string
        return str(obj)

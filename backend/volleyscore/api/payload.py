from flask import request

from volleyscore.exceptions import InvalidRequest


def json_object():
    """Request body as a dict; a missing or unparsable body counts as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidRequest('Request body must be a JSON object')
    return data


def optional_text(data, key):
    """Stripped string value of ``key``, or None when absent or blank."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidRequest(f'{key} must be a string.')
    return value.strip() or None

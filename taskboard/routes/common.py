"""Helpers shared by the API blueprints."""

from typing import Any

from flask import request

from taskboard.errors import ValidationError


def json_body() -> dict[str, Any]:
    """Return the request's JSON object; an empty body counts as ``{}``.

    Raises:
        ValidationError: If the body does not parse as JSON, or is JSON but
            not an object.
    """
    if not request.get_data(cache=True):
        return {}

    data = request.get_json(force=True, silent=True)
    if data is None:
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

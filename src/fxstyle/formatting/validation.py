from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import ValidationError

from .errors import InvalidInputError
from .models import StyleDelta


def is_valid_input(styles: object) -> bool:
    """Return True when ``styles`` is a structured record of style fields.

    Field types are not checked here.
    """
    return isinstance(styles, (Mapping, StyleDelta))


def coerce_style_delta(styles: object) -> StyleDelta:
    """Validate raw styles input and build a StyleDelta.

    Raises:
        InvalidInputError: If the input is not a record or has bad field types.
    """
    if isinstance(styles, StyleDelta):
        return styles
    if not is_valid_input(styles):
        raise InvalidInputError(
            "Invalid styles input. Provide an object such as "
            '{"bold": true, "textColor": "#FF0000"}.'
        )
    try:
        return StyleDelta.model_validate(dict(cast(Mapping[str, object], styles)))
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid styles input: {exc}") from exc

"""Validation layer between caller input and the registries.

Validates dicts against Pydantic models and turns failures into
``InvalidInput`` so callers only ever see the tournament exception tree.
Soft-validation warnings emitted by model validators are logged, not
raised.

Usage::

    from tourney.validation import validate_input
    from tourney.models import TeamRegistration

    names = validate_input(TeamRegistration, {"player_one": "Ann", ...})
"""

import logging
import warnings
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from tourney.exceptions import InvalidInput

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_errors(error: ValidationError) -> str:
    """Render a ValidationError as one ``field: message`` line per problem."""
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"]) or "input"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


def validate_input(
    model_cls: type[ModelT],
    data: dict,
    *,
    team_id: int | None = None,
    match_id: int | None = None,
) -> ModelT:
    """Validate a dict against a Pydantic model.

    Args:
        model_cls: Pydantic model class (e.g. TeamRegistration).
        data: Dict of field values to validate.
        team_id: Context attached to the raised error, if any.
        match_id: Context attached to the raised error, if any.

    Returns:
        The validated model instance.

    Raises:
        InvalidInput: The data failed validation.
    """
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            model = model_cls.model_validate(data)
    except ValidationError as e:
        message = format_errors(e)
        logger.debug("Rejected %s input: %s", model_cls.__name__, message)
        raise InvalidInput(message, team_id=team_id, match_id=match_id) from e

    for w in caught:
        logger.warning("Validation warning for %s: %s", model_cls.__name__, w.message)

    return model

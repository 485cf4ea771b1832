"""Base model for upstream SIRI payloads.

Every SIRI model inherits from :class:`SiriBaseModel` which provides:

* ``alias_generator=to_pascal`` so the feed's PascalCase keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used.

:func:`lenient` turns a nested validation failure into ``None`` for
references whose absence is acceptable.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_pascal

TModel = TypeVar("TModel", bound=BaseModel)


def lenient(model_cls: type[TModel], value: Any) -> TModel | None:
    """Validate *value* as *model_cls*, returning ``None`` when it is malformed."""
    if value is None or isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except ValidationError:
        return None


class SiriBaseModel(BaseModel):
    """Base for upstream SIRI models. All instances are immutable."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_pascal,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }

# pricewatch/config/spec.py
from typing import Any, Callable, Optional, Type

from pydantic import TypeAdapter, ValidationError

from pricewatch.logger import logger


class ConfigSpec:
    """One tunable: its type, default, range check and description.

    Raw values arrive as text from the config table, so conversion goes
    through pydantic's lax mode ("0.5" -> 0.5, "yes" -> True).
    """

    def __init__(
        self,
        type: Type = str,
        default: Any = None,
        validator: Optional[Callable[[Any], bool]] = None,
        description: str = ""
    ):
        self.type = type
        self.default = default
        self.validator = validator or (lambda x: True)
        self.description = description
        self._adapter = TypeAdapter(type)

    def validate(self, value: Any) -> Any:
        """Convert and range-check value, falling back to the default when either fails"""
        if value is None:
            logger.debug(f"Using default for config: {self.default}")
            return self.default

        try:
            converted = self._adapter.validate_python(value)
        except ValidationError as e:
            logger.warning(
                f"Config value {value!r} is not a {self.type.__name__} "
                f"(using default {self.default}): {e.errors()[0]['msg']}"
            )
            return self.default

        if not self.validator(converted):
            logger.warning(f"Config value {value!r} out of range (using default {self.default})")
            return self.default
        return converted


def split_list(value: str) -> list:
    """Split a comma separated config value, dropping blanks"""
    return [item.strip() for item in str(value or "").split(",") if item.strip()]

#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from typing import Any

__all__ = [
    "ConversionError",
    "ConverterConfigError",
    "MissingFieldError",
    "QPyBaseError",
    "RecursionLimitError",
    "UnconvertibleValueError",
    "UnknownVariantError",
    "UnknownVariantWarning",
    "VariantMismatchError",
]


def _type_name(value: object) -> str:
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    return repr(value)


class QPyBaseError(Exception):
    def __init__(self, *args: Any, reason: str | None = None, temporary: bool = False):
        """QuestionPy errors should inherit this class.

        Args:
            args: Any other arguments.
            reason: A human-readable reason which can be exposed to a third party.
            temporary: Whether this exception is temporary.
        """
        super().__init__(*args)
        self.temporary = temporary
        self.reason = reason


class ConversionError(QPyBaseError):
    """The raw data could not be converted. Always caused by the data, never by the class declarations."""

    def __init__(self, msg: str):
        super().__init__(msg, reason=msg)


class MissingFieldError(ConversionError):
    def __init__(self, field: str, target: type):
        self.field = field
        self.target = target
        super().__init__(f"No value provided for required field '{field}' of '{_type_name(target)}'")


class UnknownVariantError(ConversionError):
    def __init__(self, discriminator: str, value: object, target: type):
        self.discriminator = discriminator
        self.value = value
        self.target = target
        super().__init__(f"Unknown value for discriminator '{discriminator}': {value!r}")


class VariantMismatchError(ConversionError):
    def __init__(self, discriminator: str, expected: object, actual: object, target: type):
        self.discriminator = discriminator
        self.expected = expected
        self.actual = actual
        self.target = target
        super().__init__(f"Expected '{discriminator}' value {expected!r}, but got {actual!r}")


class UnconvertibleValueError(ConversionError):
    def __init__(self, value: object, target_type: object):
        self.value = value
        self.target_type = target_type
        target_name = target_type.__name__ if isinstance(target_type, type) else str(target_type)
        super().__init__(f"Cannot convert value of type '{type(value).__name__}' to type '{target_name}'")


class RecursionLimitError(ConversionError):
    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Maximum nesting depth of {max_depth} exceeded")


class ConverterConfigError(TypeError):
    """The converter declarations of a class are invalid.

    This is a programming error and should not be caught by code handling bad input data.
    """

    def __init__(self, msg: str, owner: type | None = None, member: str | None = None):
        self.owner = owner
        self.member = member
        if owner is not None:
            location = _type_name(owner) if member is None else f"{_type_name(owner)}.{member}"
            msg = f"{location}: {msg}"
        super().__init__(msg)


class UnknownVariantWarning(UserWarning):
    """Emitted when an unknown discriminator value was replaced by the fallback variant."""

#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>

from .config import (
    ArrayAlias,
    ArrayElementClass,
    ArrayKey,
    ArrayPolymorphic,
    ConverterConfig,
    configure,
    get_config_for,
)
from .converter import ArrayConverter, from_array, to_array
from .error import (
    ConversionError,
    ConverterConfigError,
    MissingFieldError,
    RecursionLimitError,
    UnconvertibleValueError,
    UnknownVariantError,
    UnknownVariantWarning,
    VariantMismatchError,
)
from .settings import ConverterSettings

__all__ = [
    "ArrayAlias",
    "ArrayConverter",
    "ArrayElementClass",
    "ArrayKey",
    "ArrayPolymorphic",
    "ConversionError",
    "ConverterConfig",
    "ConverterConfigError",
    "ConverterSettings",
    "MissingFieldError",
    "RecursionLimitError",
    "UnconvertibleValueError",
    "UnknownVariantError",
    "UnknownVariantWarning",
    "VariantMismatchError",
    "configure",
    "from_array",
    "get_config_for",
    "to_array",
]

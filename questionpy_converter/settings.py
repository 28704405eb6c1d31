#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConverterSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="qpy_converter_")

    unknown_variant: Literal["fallback", "error"] = "fallback"
    """What to do with unknown discriminator values when the class declares a fallback variant."""
    max_depth: int = 64
    """Maximum nesting depth of converted values."""

    @field_validator("unknown_variant", mode="before")
    @classmethod
    def unknown_variant_to_lower(cls, value: str) -> str:
        return value.lower()

    @field_validator("max_depth")
    @classmethod
    def max_depth_is_positive(cls, value: int) -> int:
        if value < 1:
            msg = "must be at least 1"
            raise ValueError(msg)
        return value

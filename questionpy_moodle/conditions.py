#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from typing_extensions import TypeAlias

from questionpy_converter import ConverterConfig, configure

__all__ = ["Condition", "ConditionWithValue", "DoesNotEqual", "Equals", "In", "IsChecked", "IsNotChecked"]

_Value: TypeAlias = str | int | bool


@dataclass
class Condition(ABC):
    """A condition on another element of the same form, used to disable or hide an element."""

    name: str
    """Name of the element the condition refers to."""

    @abstractmethod
    def to_mform_args(self) -> list[Any]:
        """Returns the operator and value arguments for Moodle's ``disabledIf`` and ``hideIf``."""


@dataclass
class IsChecked(Condition):
    def to_mform_args(self) -> list[Any]:
        return ["checked"]


@dataclass
class IsNotChecked(Condition):
    def to_mform_args(self) -> list[Any]:
        return ["notchecked"]


@dataclass
class ConditionWithValue(Condition, ABC):
    value: Any


@dataclass
class Equals(ConditionWithValue):
    value: _Value

    def to_mform_args(self) -> list[Any]:
        return ["eq", self.value]


@dataclass
class DoesNotEqual(ConditionWithValue):
    value: _Value

    def to_mform_args(self) -> list[Any]:
        return ["neq", self.value]


@dataclass
class In(ConditionWithValue):
    value: list[_Value]

    def to_mform_args(self) -> list[Any]:
        return ["in", self.value]


def _configure_condition(config: ConverterConfig) -> None:
    (
        config.discriminate_by("kind")
        .variant("is_checked", IsChecked)
        .variant("is_not_checked", IsNotChecked)
        .variant("equals", Equals)
        .variant("does_not_equal", DoesNotEqual)
        .variant("in", In)
    )


configure(Condition, _configure_condition)

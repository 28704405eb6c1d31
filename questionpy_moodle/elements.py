#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from questionpy_converter import ArrayPolymorphic, ConverterConfig, configure
from questionpy_moodle.conditions import Condition

__all__ = [
    "CheckboxElement",
    "CheckboxGroupElement",
    "FallbackElement",
    "FormConditions",
    "FormElement",
    "FormHelp",
    "FormSection",
    "GroupElement",
    "HiddenElement",
    "Option",
    "OptionsFormDefinition",
    "RadioGroupElement",
    "RepetitionElement",
    "SelectElement",
    "StaticTextElement",
    "TextAreaElement",
    "TextInputElement",
    "iter_element_names",
]


@ArrayPolymorphic(
    "kind",
    {
        "static_text": "StaticTextElement",
        "input": "TextInputElement",
        "textarea": "TextAreaElement",
        "checkbox": "CheckboxElement",
        "checkbox_group": "CheckboxGroupElement",
        "radio_group": "RadioGroupElement",
        "select": "SelectElement",
        "hidden": "HiddenElement",
        "group": "GroupElement",
        "repetition": "RepetitionElement",
    },
    fallback_variant="FallbackElement",
)
class FormElement:
    """Base class of all form elements. The ``kind`` key of the raw element decides the subclass."""


@dataclass
class FormConditions:
    """Mixin class for elements that can have conditions on other elements."""

    disable_if: list[Condition] = field(default_factory=list, init=False)
    """Disable this element if any of these conditions match."""
    hide_if: list[Condition] = field(default_factory=list, init=False)
    """Hide this element if any of these conditions match."""

    def add_disable_if(self, condition: Condition) -> "FormConditions":
        self.disable_if.append(condition)
        return self

    def add_hide_if(self, condition: Condition) -> "FormConditions":
        self.hide_if.append(condition)
        return self


@dataclass
class FormHelp:
    """Mixin class for elements that can have a help text hidden behind a button."""

    help: str | None = field(default=None, init=False)
    """Text to be shown when the help button is clicked."""


@dataclass
class StaticTextElement(FormElement, FormConditions, FormHelp):
    """Some static text with a label."""

    name: str
    label: str
    text: str


@dataclass
class TextInputElement(FormElement, FormConditions, FormHelp):
    name: str
    label: str
    required: bool = False
    """Require some non-empty input to be entered before the form can be submitted."""
    default: str | None = None
    placeholder: str | None = None
    """Shown when no value has been entered yet. Not part of the submitted form data."""


@dataclass
class TextAreaElement(TextInputElement):
    pass


@dataclass
class CheckboxElement(FormElement, FormConditions, FormHelp):
    name: str
    left_label: str | None = None
    """Label shown the same way as labels on other element types."""
    right_label: str | None = None
    """Additional label shown to the right of the checkbox."""
    required: bool = False
    selected: bool = False


@dataclass
class CheckboxGroupElement(FormElement):
    """Adds a 'Select all/none' button after multiple checkboxes."""

    name: str
    checkboxes: list[CheckboxElement]


@dataclass
class Option:
    """A possible option for radio groups and drop-downs."""

    label: str
    value: str
    selected: bool = False


@dataclass
class RadioGroupElement(FormElement, FormConditions, FormHelp):
    """Group of radio buttons, of which at most one can be selected at a time."""

    name: str
    label: str
    options: list[Option]
    required: bool = False


@dataclass
class SelectElement(FormElement, FormConditions, FormHelp):
    """A drop-down list."""

    name: str
    label: str
    options: list[Option]
    multiple: bool = False
    """Allow the selection of multiple options."""
    required: bool = False


@dataclass
class HiddenElement(FormElement, FormConditions):
    """An element that isn't shown to the user but still submits its fixed value."""

    name: str
    value: str


@dataclass
class GroupElement(FormElement, FormConditions, FormHelp):
    """Groups multiple elements horizontally with a common label."""

    name: str
    label: str
    elements: list[FormElement]


@dataclass
class RepetitionElement(FormElement):
    """Repeats a number of elements, allowing the user to add new repetitions with the click of a button."""

    name: str
    initial_repetitions: int
    """Number of repetitions to show when the form is first loaded."""
    increment: int
    """Number of repetitions to add with each click of the button."""
    elements: list[FormElement]
    minimum_repetitions: int = 1
    """Minimum number of repetitions, at or below which removal is not possible."""
    button_label: str | None = None
    """Label for the button that adds more repetitions, or None to use the default provided by the LMS."""


@dataclass
class FallbackElement(FormElement):
    """Stands in for elements of a kind this version doesn't know yet. Rendered as a warning."""

    name: str | None = None


@dataclass
class FormSection:
    """Form section that can be expanded and collapsed."""

    name: str
    header: str
    elements: list


@dataclass
class OptionsFormDefinition:
    general: list = field(default_factory=list)
    """Elements to add to the main section, after the LMS' own elements."""
    sections: list = field(default_factory=list)
    """Sections to add after the main section."""


def _configure_form_section(config: ConverterConfig) -> None:
    config.array_elements("elements", FormElement)


def _configure_options_form_definition(config: ConverterConfig) -> None:
    config.array_elements("general", FormElement).array_elements("sections", FormSection)


configure(FormSection, _configure_form_section)
configure(OptionsFormDefinition, _configure_options_form_definition)


def _iter_names(elements: Iterable[FormElement]) -> Iterator[str]:
    for element in elements:
        name = getattr(element, "name", None)
        if name is not None:
            yield name
        if isinstance(element, CheckboxGroupElement):
            yield from _iter_names(element.checkboxes)
        elif isinstance(element, (GroupElement, RepetitionElement)):
            yield from _iter_names(element.elements)


def iter_element_names(definition: OptionsFormDefinition) -> Iterator[str]:
    """Yields the names of all elements in the given form, in document order, including nested ones."""
    yield from _iter_names(definition.general)
    for section in definition.sections:
        yield from _iter_names(section.elements)

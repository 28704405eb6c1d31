#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
import logging
import random
from typing import Any

import pytest
from polyfactory import Use
from polyfactory.factories import DataclassFactory

from questionpy_converter import (
    ArrayConverter,
    ConverterConfigError,
    ConverterSettings,
    MissingFieldError,
    RecursionLimitError,
    UnconvertibleValueError,
    UnknownVariantError,
    UnknownVariantWarning,
    VariantMismatchError,
    from_array,
    to_array,
)
from tests.questionpy_converter.classes import (
    AbstractTarget,
    Color,
    Cyclic,
    HasInt,
    Injected,
    KeywordOnly,
    Nested,
    Polymorphic,
    Simple,
    Strict,
    StrictVariant,
    Tree,
    Unregistered,
    UsesElementClass,
    UsesRenameAndAlias,
    Variadic,
    Variant1,
    Variant2,
)


class NestedFactory(DataclassFactory[Nested]):
    __model__ = Nested

    variant = Use(lambda: random.choice([Variant1("first"), Variant2("second", 42)]))


def test_should_deserialize_renamed_keys() -> None:
    instance = from_array(UsesRenameAndAlias, {"my_prop_1": "value1", "my_prop_2": "value2"})

    assert instance.myprop1 == "value1"
    assert instance.myprop2 == "value2"


def test_should_serialize_to_renamed_keys() -> None:
    instance = UsesRenameAndAlias("value2")
    instance.myprop1 = "value1"

    assert to_array(instance) == {"my_prop_1": "value1", "my_prop_2": "value2"}


def test_should_deserialize_aliases() -> None:
    instance = from_array(UsesRenameAndAlias, {"my_alias_1": "value1", "my_alias_2": "value2"})

    assert instance.myprop1 == "value1"
    assert instance.myprop2 == "value2"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"my_prop_2": "renamed", "my_alias_2": "alias"}, "renamed"),
        ({"my_prop_2": "renamed", "myprop2": "original"}, "renamed"),
        ({"my_alias_2": "alias", "myprop2": "original"}, "alias"),
    ],
)
def test_rename_takes_precedence(raw: dict[str, Any], expected: str) -> None:
    assert from_array(UsesRenameAndAlias, raw).myprop2 == expected


def test_should_deserialize_array_elements() -> None:
    instance = from_array(UsesElementClass, {"myarray": [{"prop": "value1"}, {"prop": "value2"}]})

    assert instance.myarray == [Simple("value1"), Simple("value2")]


def test_should_infer_element_class_from_type_arguments() -> None:
    raw = {
        "simple": {"prop": "a"},
        "simples": [{"prop": "b"}],
        "by_name": {"c": {"prop": "c"}},
        "color": "green",
        "tags": ["x", "y"],
        "variant": {"discriminator": "var1", "prop": "d"},
    }

    instance = from_array(Nested, raw)

    assert instance == Nested(
        simple=Simple("a"),
        simples=[Simple("b")],
        by_name={"c": Simple("c")},
        color=Color.GREEN,
        tags=("x", "y"),
        variant=Variant1("d"),
    )


def test_should_deserialize_polymorphic() -> None:
    instance = from_array(Polymorphic, {"discriminator": "var2", "prop": "value1"})

    assert instance == Variant2("value1")
    assert type(instance) is Variant2


def test_should_use_fallback_variant(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING), pytest.warns(UnknownVariantWarning):
        instance = from_array(Polymorphic, {"discriminator": "abcdefg", "prop": "value2"})

    assert instance == Simple("value2")
    assert caplog.record_tuples == [
        (
            "questionpy-converter:converter",
            logging.WARNING,
            "Unknown value for discriminator 'discriminator': 'abcdefg'. "
            "Using fallback variant 'tests.questionpy_converter.classes.Simple'.",
        )
    ]


def test_should_use_fallback_variant_when_discriminator_is_missing() -> None:
    with pytest.warns(UnknownVariantWarning):
        instance = from_array(Polymorphic, {"prop": "value"})

    assert instance == Simple("value")


def test_should_raise_on_unknown_variant_when_configured() -> None:
    converter = ArrayConverter(ConverterSettings(unknown_variant="error"))

    with pytest.raises(UnknownVariantError) as exc_info:
        converter.from_array(Polymorphic, {"discriminator": "abcdefg", "prop": "value2"})

    assert exc_info.value.value == "abcdefg"


def test_should_raise_on_unknown_variant_without_fallback() -> None:
    with pytest.raises(UnknownVariantError, match="Unknown value for discriminator 'type': 'b'"):
        from_array(Strict, {"type": "b"})


def test_should_accept_matching_discriminator_for_explicit_variant() -> None:
    assert type(from_array(StrictVariant, {"type": "a"})) is StrictVariant
    assert type(from_array(StrictVariant, {})) is StrictVariant


def test_should_raise_on_variant_mismatch() -> None:
    with pytest.raises(VariantMismatchError) as exc_info:
        from_array(Variant1, {"discriminator": "var2", "prop": "value"})

    assert exc_info.value.expected == "var1"
    assert exc_info.value.actual == "var2"


def test_should_raise_on_missing_field() -> None:
    with pytest.raises(MissingFieldError) as exc_info:
        from_array(Simple, {})

    assert exc_info.value.field == "prop"
    assert exc_info.value.target is Simple
    assert exc_info.value.reason == (
        "No value provided for required field 'prop' of 'tests.questionpy_converter.classes.Simple'"
    )


def test_should_raise_on_mapping_for_scalar_property() -> None:
    with pytest.raises(UnconvertibleValueError, match="Cannot convert value of type 'dict' to type 'int'"):
        from_array(HasInt, {"value": {"nested": True}})


def test_should_raise_on_invalid_enum_value() -> None:
    raw = {
        "simple": {"prop": "a"},
        "simples": [],
        "by_name": {},
        "color": "blue",
        "tags": [],
        "variant": {"discriminator": "var1", "prop": "d"},
    }

    with pytest.raises(UnconvertibleValueError):
        from_array(Nested, raw)


def test_should_raise_on_non_mapping() -> None:
    with pytest.raises(UnconvertibleValueError):
        from_array(Simple, ["prop"])  # type: ignore[arg-type]


def test_should_ignore_unknown_keys() -> None:
    assert from_array(Simple, {"prop": "value", "unknown": 1}) == Simple("value")


def test_should_not_modify_raw() -> None:
    raw = {"discriminator": "var2", "prop": "value", "other": 3}
    copy = dict(raw)

    from_array(Polymorphic, raw)

    assert raw == copy


def test_should_bind_variadic_parameters() -> None:
    instance = from_array(Variadic, {"name": "n", "items": [{"prop": "a"}, {"prop": "b"}], "flag": True})

    assert instance.name == "n"
    assert instance.items == (Simple("a"), Simple("b"))
    assert instance.flag is True


def test_should_allow_missing_variadic_parameters() -> None:
    instance = from_array(Variadic, {"name": "n"})

    assert instance.items == ()
    assert instance.flag is False


def test_should_bind_keyword_only_parameters() -> None:
    instance = from_array(KeywordOnly, {"required": 1})

    assert instance.required == 1
    assert instance.optional == "default"

    with pytest.raises(MissingFieldError):
        from_array(KeywordOnly, {"optional": "value"})


def test_should_inject_remaining_properties_after_construction() -> None:
    instance = from_array(Injected, {"name": "n", "late": "set", "counter": 5})

    assert instance.name == "n"
    assert instance.late == "set"
    assert Injected.counter == 0


def test_should_not_instantiate_abstract_class() -> None:
    with pytest.raises(ConverterConfigError, match="abstract"):
        from_array(AbstractTarget, {})


def test_should_limit_deserialization_depth() -> None:
    converter = ArrayConverter(ConverterSettings(max_depth=3))
    raw: dict[str, Any] = {"children": []}
    for _ in range(5):
        raw = {"children": [raw]}

    with pytest.raises(RecursionLimitError):
        converter.from_array(Tree, raw)


def test_should_serialize_polymorphic_with_discriminator() -> None:
    assert to_array(Variant2("value", 3)) == {"prop": "value", "other": 3, "discriminator": "var2"}


def test_should_raise_on_serializing_unregistered_variant() -> None:
    with pytest.raises(ConverterConfigError, match="is not a registered variant"):
        to_array(Unregistered("value"))


def test_should_serialize_scalars_and_containers() -> None:
    assert to_array(None) is None
    assert to_array(3) == 3
    assert to_array(Color.RED) == "red"
    assert to_array((Simple("a"), {"b": Simple("b")})) == [{"prop": "a"}, {"b": {"prop": "b"}}]


def test_should_omit_unset_properties() -> None:
    instance = UsesRenameAndAlias("value2")

    assert to_array(instance) == {"my_prop_2": "value2"}


def test_should_limit_serialization_depth() -> None:
    cyclic = Cyclic()
    cyclic.other = cyclic

    with pytest.raises(RecursionLimitError):
        to_array(cyclic)


def test_round_trip() -> None:
    for instance in NestedFactory.batch(10):
        assert from_array(Nested, to_array(instance)) == instance


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"my_prop_1": "renamed", "my_alias_1": "alias", "my_prop_2": "x"}, "renamed"),
        ({"my_alias_1": "alias", "myprop1": "original", "my_prop_2": "x"}, "alias"),
    ],
)
def test_rename_takes_precedence_for_injected_property(raw: dict[str, Any], expected: str) -> None:
    assert from_array(UsesRenameAndAlias, raw).myprop1 == expected


@pytest.mark.parametrize("value", ["not a mapping", 3, True])
def test_should_raise_on_scalar_for_class_property(value: object) -> None:
    raw = {
        "simple": value,
        "simples": [],
        "by_name": {},
        "color": "red",
        "tags": [],
        "variant": {"discriminator": "var1", "prop": "d"},
    }

    with pytest.raises(UnconvertibleValueError, match=f"Cannot convert value of type '{type(value).__name__}' to type"):
        from_array(Nested, raw)


def test_should_raise_on_scalar_element_of_class_list() -> None:
    with pytest.raises(UnconvertibleValueError):
        from_array(UsesElementClass, {"myarray": [{"prop": "value1"}, "value2"]})

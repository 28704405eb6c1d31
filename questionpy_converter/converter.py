#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
import inspect
import logging
import warnings
from collections.abc import (
    Collection,
    Iterable,
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
    Set,
)
from enum import Enum
from functools import cache
from inspect import Parameter
from types import NoneType, UnionType
from typing import Any, ClassVar, TypeVar, Union, get_args, get_origin, get_type_hints

from questionpy_converter.config import ConverterConfig, get_config_for, strip_annotated
from questionpy_converter.error import (
    ConverterConfigError,
    MissingFieldError,
    RecursionLimitError,
    UnconvertibleValueError,
    UnknownVariantError,
    UnknownVariantWarning,
    VariantMismatchError,
)
from questionpy_converter.settings import ConverterSettings

__all__ = ["ArrayConverter", "from_array", "to_array"]

_log = logging.getLogger("questionpy-converter:converter")

_T = TypeVar("_T")

_SCALARS = (str, bytes, int, float, bool)
_SEQUENCE_TYPES = (list, tuple, set, frozenset, Sequence, MutableSequence, Set, MutableSet, Collection, Iterable)
_MAPPING_TYPES = (dict, Mapping, MutableMapping)
_REBUILT_SEQUENCE_TYPES = (tuple, set, frozenset)
_NON_CONVERTIBLE_MODULES = ("builtins", "collections.abc", "typing", "typing_extensions")


def _is_convertible_class(hint: Any) -> bool:
    """Returns whether raw mappings should be deserialized to instances of `hint`."""
    return isinstance(hint, type) and hint.__module__ not in _NON_CONVERTIBLE_MODULES and not issubclass(hint, Enum)


@cache
def _property_hints(cls: type) -> dict[str, Any]:
    """Type hints of all non-static properties of `cls`, base classes first."""
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        msg = f"could not resolve type hints: {e}"
        raise ConverterConfigError(msg, cls) from e

    return {
        name: hint
        for name, hint in hints.items()
        if get_origin(strip_annotated(hint)) is not ClassVar
        and strip_annotated(hint) is not ClassVar
        and not isinstance(inspect.getattr_static(cls, name, None), property)
    }


@cache
def _constructor_parameters(cls: type) -> tuple[tuple[Parameter, Any], ...]:
    """The constructor parameters of `cls` and their type hints, if any."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError) as e:
        msg = f"could not inspect constructor: {e}"
        raise ConverterConfigError(msg, cls) from e

    init_hints: dict[str, Any] = {}
    init = getattr(cls, "__init__", None)
    if inspect.isfunction(init):
        try:
            init_hints = get_type_hints(init, include_extras=True)
        except (NameError, TypeError):
            # Generated initializers (e.g. of dataclasses) may not resolve, their fields' hints are used instead.
            _log.debug("Could not resolve constructor hints of '%s', using property hints.", cls.__qualname__)

    property_hints = _property_hints(cls)
    parameters = []
    for parameter in signature.parameters.values():
        hint = init_hints.get(parameter.name, property_hints.get(parameter.name))
        parameters.append((parameter, hint))

    return tuple(parameters)


def _pop_first_present(raw: dict[str, Any], keys: Iterable[str]) -> tuple[bool, Any]:
    for key in keys:
        if key in raw:
            return True, raw.pop(key)
    return False, None


class ArrayConverter:
    """Converts between class instances and plain, JSON-compatible structures of dicts, lists and scalars."""

    def __init__(self, settings: ConverterSettings | None = None):
        self._settings = settings or ConverterSettings()

    @property
    def settings(self) -> ConverterSettings:
        return self._settings

    def from_array(self, cls: type[_T], raw: Mapping[str, Any]) -> _T:
        """Recursively converts a raw mapping to an instance of the given class.

        If `cls` is polymorphic, the result may be an instance of one of its variants instead.

        Args:
            cls: Target class.
            raw: Raw mapping, e.g. one parsed using :func:`json.loads`. It is not modified.

        Raises:
            ConversionError: If `raw` doesn't fit `cls`.
            ConverterConfigError: If the converter declarations of `cls` or any nested class are invalid.
        """
        return self._from_array(cls, raw, 0)

    def to_array(self, value: Any) -> Any:
        """Converts class instances to plain dicts, and leaves scalar values untouched.

        Raises:
            ConverterConfigError: If a polymorphic instance is not of a registered variant.
            RecursionLimitError: If the value is nested too deeply or contains a cycle.
        """
        return self._to_array(value, 0)

    def _check_depth(self, depth: int) -> None:
        if depth > self._settings.max_depth:
            raise RecursionLimitError(self._settings.max_depth)

    def _from_array(self, cls: type[_T], raw: object, depth: int) -> _T:
        self._check_depth(depth)
        if not isinstance(raw, Mapping):
            raise UnconvertibleValueError(raw, cls)

        remaining = dict(raw)
        config = get_config_for(cls)
        if config.discriminator is not None:
            cls, config = self._resolve_variant(cls, config, remaining)

        if inspect.isabstract(cls):
            msg = "is abstract and cannot be instantiated"
            raise ConverterConfigError(msg, cls)

        args, kwargs = self._gather_arguments(cls, config, remaining, depth)
        properties = self._gather_properties(cls, config, remaining, depth)

        instance = cls(*args, **kwargs)
        for name, value in properties.items():
            setattr(instance, name, value)

        return instance

    def _resolve_variant(self, cls: type, config: ConverterConfig, raw: dict[str, Any]) -> tuple[type, ConverterConfig]:
        assert config.discriminator is not None
        discriminator = raw.pop(config.discriminator, None)

        try:
            expected = config.variant_value_of(cls)
        except KeyError:
            pass
        else:
            # The target is a specific variant, which the discriminator (if any) has to agree with.
            if discriminator is not None and discriminator != expected:
                raise VariantMismatchError(config.discriminator, expected, discriminator, cls)
            return cls, config

        try:
            variant = config.variants.get(discriminator)
        except TypeError:
            # Unhashable discriminator values can't be registered.
            variant = None

        if variant is None:
            if config.fallback_variant is None or self._settings.unknown_variant == "error":
                raise UnknownVariantError(config.discriminator, discriminator, cls)

            variant = config.fallback_variant
            assert isinstance(variant, type)
            msg = (
                f"Unknown value for discriminator '{config.discriminator}': '{discriminator}'. Using fallback "
                f"variant '{variant.__module__}.{variant.__qualname__}'."
            )
            _log.warning(msg)
            warnings.warn(msg, UnknownVariantWarning, stacklevel=4)
            return variant, get_config_for(variant, config)

        assert isinstance(variant, type)
        variant_config = get_config_for(variant, config)
        try:
            variant_config.variant_value_of(variant)
        except KeyError as e:
            msg = f"is registered as variant {discriminator!r}, but its own configuration does not list it"
            raise ConverterConfigError(msg, variant) from e

        return variant, variant_config

    def _gather_arguments(
        self, cls: type, config: ConverterConfig, raw: dict[str, Any], depth: int
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for parameter, hint in _constructor_parameters(cls):
            if parameter.kind is Parameter.VAR_KEYWORD:
                continue

            element_class = config.element_classes.get(parameter.name)
            found, value = _pop_first_present(raw, config.keys_for(parameter.name))

            if found:
                if parameter.kind is Parameter.VAR_POSITIONAL:
                    items = value if isinstance(value, (list, tuple)) else [value]
                    args.extend(self._convert(element_class or hint, None, item, depth + 1) for item in items)
                elif parameter.kind is Parameter.KEYWORD_ONLY:
                    kwargs[parameter.name] = self._convert(hint, element_class, value, depth)
                else:
                    args.append(self._convert(hint, element_class, value, depth))
            elif parameter.default is not Parameter.empty:
                if parameter.kind is not Parameter.KEYWORD_ONLY:
                    args.append(parameter.default)
            elif parameter.kind is not Parameter.VAR_POSITIONAL:
                raise MissingFieldError(parameter.name, cls)

        return args, kwargs

    def _gather_properties(self, cls: type, config: ConverterConfig, raw: dict[str, Any], depth: int) -> dict[str, Any]:
        parameter_names = {parameter.name for parameter, _ in _constructor_parameters(cls)}
        properties: dict[str, Any] = {}

        for name, hint in _property_hints(cls).items():
            if name in parameter_names:
                continue

            found, value = _pop_first_present(raw, config.keys_for(name))
            if found:
                properties[name] = self._convert(hint, config.element_classes.get(name), value, depth)

        # Any remaining keys are unknown to this class and ignored.
        return properties

    def _convert(self, hint: Any, element_class: type | None, value: Any, depth: int) -> Any:
        """Attempts to convert a raw value to the given type hint.

        Args:
            hint: Target type hint, or `None` if the target is untyped, in which case no conversion is done.
            element_class: The configured class of sequence elements or mapping values, if any.
            value: Raw value to convert.
            depth: Nesting depth of the value.
        """
        hint = strip_annotated(hint)
        if value is None or hint is None or hint is Any or hint is object:
            return value

        origin = get_origin(hint)
        if origin is Union or origin is UnionType:
            arms = [arm for arm in get_args(hint) if arm is not NoneType]
            if len(arms) == 1:
                return self._convert(arms[0], element_class, value, depth)
            if isinstance(value, Mapping):
                raise UnconvertibleValueError(value, hint)
            if element_class is not None and isinstance(value, (list, tuple)):
                return [self._convert(element_class, None, item, depth + 1) for item in value]
            return value

        if isinstance(hint, type) and issubclass(hint, Enum):
            if isinstance(value, hint):
                return value
            try:
                return hint(value)
            except ValueError as e:
                raise UnconvertibleValueError(value, hint) from e

        container = origin or hint
        args = get_args(hint)

        if isinstance(value, (list, tuple)):
            if container in _SEQUENCE_TYPES:
                item_hint = element_class or (args[0] if args else None)
                if item_hint is None:
                    return value
                items = [self._convert(item_hint, None, item, depth + 1) for item in value]
                return container(items) if container in _REBUILT_SEQUENCE_TYPES else items
            if _is_convertible_class(hint):
                raise UnconvertibleValueError(value, hint)
            return value

        if isinstance(value, Mapping):
            if container in _MAPPING_TYPES:
                value_hint = element_class or (args[1] if len(args) == 2 else None)
                if value_hint is None:
                    return value
                return {key: self._convert(value_hint, None, item, depth + 1) for key, item in value.items()}
            if _is_convertible_class(hint):
                return self._from_array(hint, value, depth + 1)
            raise UnconvertibleValueError(value, hint)

        if _is_convertible_class(hint) and not isinstance(value, hint):
            # Class-typed values must be given as mappings.
            raise UnconvertibleValueError(value, hint)

        return value

    def _to_array(self, value: Any, depth: int) -> Any:
        self._check_depth(depth)

        if value is None or isinstance(value, _SCALARS):
            return value
        if isinstance(value, Enum):
            return self._to_array(value.value, depth)
        if isinstance(value, Mapping):
            return {key: self._to_array(item, depth + 1) for key, item in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._to_array(item, depth + 1) for item in value]

        cls = type(value)
        config = get_config_for(cls)

        result: dict[str, Any] = {}
        for name in self._serialized_properties(value):
            result[config.renames.get(name, name)] = self._to_array(getattr(value, name), depth + 1)

        if config.discriminator is not None:
            try:
                result[config.discriminator] = config.variant_value_of(cls)
            except KeyError as e:
                msg = f"is not a registered variant for discriminator '{config.discriminator}'"
                raise ConverterConfigError(msg, cls) from e

        return result

    @staticmethod
    def _serialized_properties(instance: object) -> list[str]:
        names = [name for name in _property_hints(type(instance)) if hasattr(instance, name)]
        known = set(names)
        names.extend(
            name for name in getattr(instance, "__dict__", {}) if name not in known and not name.startswith("_")
        )
        return names


@cache
def _default_converter() -> ArrayConverter:
    return ArrayConverter()


def from_array(cls: type[_T], raw: Mapping[str, Any]) -> _T:
    """Recursively converts a raw mapping to an instance of the given class, using the default settings.

    See :meth:`ArrayConverter.from_array`.
    """
    return _default_converter().from_array(cls, raw)


def to_array(value: Any) -> Any:
    """Converts class instances to plain dicts, using the default settings.

    See :meth:`ArrayConverter.to_array`.
    """
    return _default_converter().to_array(value)

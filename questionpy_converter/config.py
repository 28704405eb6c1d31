#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
import inspect
import logging
import sys
from collections.abc import Callable, Mapping
from copy import deepcopy
from dataclasses import dataclass
from functools import cache
from pydoc import locate
from typing import Annotated, Any, TypeVar, get_args, get_origin, get_type_hints

from typing_extensions import TypeAlias

from questionpy_converter.error import ConverterConfigError

__all__ = [
    "ArrayAlias",
    "ArrayElementClass",
    "ArrayKey",
    "ArrayPolymorphic",
    "ClassRef",
    "ConfigHook",
    "ConverterConfig",
    "configure",
    "get_config_for",
    "strip_annotated",
]

_log = logging.getLogger("questionpy-converter:config")

_T = TypeVar("_T", bound=type)

ClassRef: TypeAlias = type | str
"""A class, or the name of a class which is resolved relative to the module of the declaring class."""


@dataclass(frozen=True)
class ArrayKey:
    """Changes the key under which the annotated property appears in arrays.

    Unlike aliases, the key is used for both serialization and deserialization, and replaces the property name.
    """

    key: str


@dataclass(frozen=True)
class ArrayAlias:
    """Adds a key which is tried during deserialization if neither the property name nor its rename is present.

    May be given multiple times. Aliases are tried in the order in which they are declared.
    """

    alias: str


@dataclass(frozen=True)
class ArrayElementClass:
    """For a sequence- or mapping-typed property, sets the class to deserialize its elements (or values) to."""

    cls: ClassRef


class ConverterConfig:
    """Customizes the way in which a class and its subclasses are converted from and to arrays."""

    def __init__(self) -> None:
        self.renames: dict[str, str] = {}
        """Mapping from property names to array keys."""
        self.aliases: dict[str, list[str]] = {}
        """Mapping from property names to lists of their aliases."""
        self.element_classes: dict[str, ClassRef] = {}
        """Mapping from property names to the classes of their elements."""

        self.discriminator: str | None = None
        """Array key whose value decides the concrete class, if any."""
        self.variants: dict[Any, ClassRef] = {}
        """Mapping from discriminator values to concrete classes."""
        self.fallback_variant: ClassRef | None = None
        """If an unknown discriminator is given, warn and use this class."""

    def rename(self, prop: str, key: str) -> "ConverterConfig":
        """Changes the name under which the value of a property appears in arrays.

        Renames apply to both serialization and deserialization, and replace the original property name.
        """
        self.renames[prop] = key
        return self

    def alias(self, prop: str, alias: str) -> "ConverterConfig":
        """Adds an alias for the given property, which is only tried during deserialization."""
        aliases = self.aliases.setdefault(prop, [])
        if alias not in aliases:
            aliases.append(alias)
        return self

    def array_elements(self, prop: str, cls: ClassRef) -> "ConverterConfig":
        self.element_classes[prop] = cls
        return self

    def discriminate_by(self, discriminator: str) -> "ConverterConfig":
        """Enables polymorphic deserialization, using the given key as a discriminator."""
        self.discriminator = discriminator
        return self

    def variant(self, value: Any, cls: ClassRef) -> "ConverterConfig":
        self.variants[value] = cls
        return self

    def fallback_variant_class(self, cls: ClassRef) -> "ConverterConfig":
        self.fallback_variant = cls
        return self

    def keys_for(self, prop: str) -> list[str]:
        """Returns the array keys to try for the given property, in order."""
        return [self.renames.get(prop, prop), *self.aliases.get(prop, ())]

    def variant_value_of(self, cls: type) -> Any:
        """Returns the discriminator value under which exactly `cls` is registered.

        Raises:
            KeyError: If `cls` is not a registered variant.
        """
        for value, variant in self.variants.items():
            if variant is cls:
                return value
        raise KeyError(cls)

    def copy(self) -> "ConverterConfig":
        return deepcopy(self)

    def resolve_references(self, owner: type) -> None:
        """Replaces class names declared by `owner` with the classes themselves."""
        self.element_classes = {
            prop: _resolve_class(ref, owner, prop) for prop, ref in self.element_classes.items()
        }
        self.variants = {
            value: _resolve_class(ref, owner, f"<variant {value!r}>") for value, ref in self.variants.items()
        }
        if self.fallback_variant is not None:
            self.fallback_variant = _resolve_class(self.fallback_variant, owner, "<fallback variant>")


ConfigHook: TypeAlias = Callable[[ConverterConfig], None]

_hooks: dict[type, list[ConfigHook]] = {}


class ArrayPolymorphic:
    """Class decorator enabling polymorphic deserialization, using the given key as a discriminator.

    Args:
        discriminator: The array key whose value decides the concrete class used for deserialization.
        variants: Discriminator values and the concrete classes they stand for.
        fallback_variant: Class to use, with a warning, when an unknown discriminator value is encountered. By default,
            unknown values are an error.
    """

    def __init__(
        self, discriminator: str, variants: Mapping[Any, ClassRef], fallback_variant: ClassRef | None = None
    ) -> None:
        self.discriminator = discriminator
        self.variants = dict(variants)
        self.fallback_variant = fallback_variant

    def __call__(self, cls: _T) -> _T:
        configure(cls, self.apply)
        return cls

    def apply(self, config: ConverterConfig) -> None:
        config.discriminate_by(self.discriminator)
        for value, variant in self.variants.items():
            config.variant(value, variant)
        if self.fallback_variant is not None:
            config.fallback_variant_class(self.fallback_variant)


def configure(cls: type, hook: ConfigHook) -> None:
    """Customizes the way in which `cls` and its subclasses are converted from and to arrays.

    For mixins, the configuration is applied to any class inheriting from them. When converting, the hooks of a class,
    its base classes and its mixins are all applied to a single :class:`ConverterConfig` in reverse method resolution
    order. Later classes override earlier ones, so for ``class Child(Base, Mixin)`` the order is ``Mixin``, ``Base``,
    ``Child``, and a rename declared by ``Base`` wins over a conflicting one declared by ``Mixin``, just like attribute
    lookup does.

    Args:
        cls: Class or mixin whose conversion should be customized.
        hook: Function which takes a :class:`ConverterConfig` and adds its own configuration to it.
    """
    _hooks.setdefault(cls, []).append(hook)
    _resolve.cache_clear()


def get_config_for(cls: type, base: ConverterConfig | None = None) -> ConverterConfig:
    """Collects the configuration of the given class, its base classes and its mixins.

    Args:
        cls: The class to be converted.
        base: An existing config to add to. If omitted, the configuration starts out empty.

    Returns:
        A config which may be modified by the caller.
    """
    if base is None:
        return _resolve(cls).copy()

    config = base.copy()
    _apply_declarations(cls, config)
    return config


@cache
def _resolve(cls: type) -> ConverterConfig:
    config = ConverterConfig()
    _apply_declarations(cls, config)
    _log.debug("Resolved converter config for '%s.%s'.", cls.__module__, cls.__qualname__)
    return config


def _apply_declarations(cls: type, config: ConverterConfig) -> None:
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue

        for member, hint in _own_attribute_hints(klass).items():
            _apply_markers(config, klass, member, hint)
        for member, hint in _own_init_hints(klass).items():
            _apply_markers(config, klass, member, hint)
        for hook in _hooks.get(klass, ()):
            hook(config)

        config.resolve_references(klass)


def _apply_markers(config: ConverterConfig, owner: type, member: str, hint: object) -> None:
    if get_origin(hint) is not Annotated:
        return

    for marker in hint.__metadata__:  # type: ignore[attr-defined]
        if isinstance(marker, ArrayKey):
            if not isinstance(marker.key, str):
                msg = f"array key must be a string, got {marker.key!r}"
                raise ConverterConfigError(msg, owner, member)
            config.rename(member, marker.key)
        elif isinstance(marker, ArrayAlias):
            if not isinstance(marker.alias, str):
                msg = f"array alias must be a string, got {marker.alias!r}"
                raise ConverterConfigError(msg, owner, member)
            config.alias(member, marker.alias)
        elif isinstance(marker, ArrayElementClass):
            config.array_elements(member, marker.cls)


def _own_attribute_hints(klass: type) -> dict[str, Any]:
    own = inspect.get_annotations(klass)
    if not own:
        return {}

    try:
        hints = get_type_hints(klass, include_extras=True)
    except (NameError, TypeError) as e:
        msg = f"could not resolve type hints: {e}"
        raise ConverterConfigError(msg, klass) from e

    return {name: hints[name] for name in own if name in hints}


def _own_init_hints(klass: type) -> dict[str, Any]:
    init = klass.__dict__.get("__init__")
    if not inspect.isfunction(init):
        return {}

    params = getattr(klass, "__dataclass_params__", None)
    if params is not None and params.init and "__dataclass_fields__" in klass.__dict__:
        # Generated by @dataclass: the field annotations have already been applied.
        return {}

    try:
        hints = get_type_hints(init, include_extras=True)
    except (NameError, TypeError) as e:
        msg = f"could not resolve type hints: {e}"
        raise ConverterConfigError(msg, klass, "__init__") from e

    hints.pop("return", None)
    return hints


def _resolve_class(ref: object, owner: type, member: str) -> type:
    if isinstance(ref, type):
        return ref

    if not isinstance(ref, str):
        msg = f"expected a class or the name of one, got {ref!r}"
        raise ConverterConfigError(msg, owner, member)

    located: object = sys.modules.get(owner.__module__)
    for part in ref.split("."):
        located = getattr(located, part, None)

    if located is None and "." in ref:
        located = locate(ref)

    if not isinstance(located, type):
        msg = f"could not locate class '{ref}'"
        raise ConverterConfigError(msg, owner, member)

    return located


def strip_annotated(hint: Any) -> Any:
    """Returns the type wrapped by any number of :class:`typing.Annotated` layers."""
    while get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    return hint

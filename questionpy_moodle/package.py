#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from collections.abc import Iterable
from typing import Annotated, Any

from questionpy_converter import ArrayAlias, ArrayElementClass, ArrayKey, to_array

__all__ = ["Package", "PackageInfo", "PackageVersionSpecificInfo", "PackageVersionsInfo", "get_localized"]


def get_localized(values: dict[str, str] | None, languages: Iterable[str]) -> str:
    """Picks the value of the first available language.

    Falls back to the first value if none of the given languages is available, and to an empty string if there are no
    values at all.
    """
    if not values:
        return ""

    for language in languages:
        if language in values:
            return values[language]

    return next(iter(values.values()))


class PackageInfo:
    """Package metadata shared by all versions of a package.

    Database rows use the column name ``shortname``, which is accepted as an alias.
    """

    short_name: Annotated[str, ArrayAlias("shortname")]
    namespace: str
    name: dict[str, str]
    type: str
    author: str | None
    url: str | None
    languages: list[str] | None
    description: dict[str, str] | None
    icon: str | None
    license: str | None
    tags: list[str] | None

    def __init__(
        self,
        short_name: str,
        namespace: str,
        name: dict[str, str],
        type: str,
        author: str | None = None,
        url: str | None = None,
        languages: list[str] | None = None,
        description: dict[str, str] | None = None,
        icon: str | None = None,
        license: str | None = None,
        tags: list[str] | None = None,
    ):
        self.short_name = short_name
        self.namespace = namespace
        self.name = name
        self.type = type
        self.author = author
        self.url = url
        self.languages = languages
        self.description = description
        self.icon = icon
        self.license = license
        self.tags = tags

    @property
    def identifier(self) -> str:
        return f"@{self.namespace}/{self.short_name}"

    def get_localized_name(self, languages: Iterable[str]) -> str:
        return get_localized(self.name, languages)

    def get_localized_description(self, languages: Iterable[str]) -> str:
        return get_localized(self.description, languages)

    def as_localized_dict(self, languages: Iterable[str]) -> dict[str, Any]:
        """Converts this package to a dict, with name and description localized to the first matching language."""
        languages = list(languages)
        return {
            **to_array(self),
            "name": self.get_localized_name(languages),
            "description": self.get_localized_description(languages),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageInfo):
            return NotImplemented
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier!r})"


class PackageVersionSpecificInfo:
    hash: Annotated[str, ArrayKey("package_hash"), ArrayAlias("hash")]
    version: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageVersionSpecificInfo):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(hash={getattr(self, 'hash', None)!r}, version={getattr(self, 'version', None)!r})"


class PackageVersionsInfo:
    """A package and all of its available versions, latest first."""

    manifest: PackageInfo
    versions: Annotated[list, ArrayElementClass(PackageVersionSpecificInfo)]

    def __init__(self, manifest: PackageInfo, versions: list[PackageVersionSpecificInfo]):
        self.manifest = manifest
        self.versions = versions

    @property
    def latest(self) -> PackageVersionSpecificInfo | None:
        return self.versions[0] if self.versions else None


class Package(PackageInfo):
    """A specific version of a package."""

    hash: Annotated[str, ArrayKey("package_hash"), ArrayAlias("hash")]
    version: str

#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from typing import Any

import pytest

from questionpy_converter import MissingFieldError, from_array, to_array
from questionpy_moodle.package import (
    Package,
    PackageInfo,
    PackageVersionSpecificInfo,
    PackageVersionsInfo,
    get_localized,
)

MANIFEST: dict[str, Any] = {
    "short_name": "example",
    "namespace": "local",
    "name": {"en": "Example", "de": "Beispiel"},
    "type": "QUESTIONTYPE",
    "author": "Jane Doe",
    "languages": ["en", "de"],
    "description": {"en": "An example package."},
    "tags": ["example"],
    "unknown": "ignored",
}


@pytest.mark.parametrize(
    ("values", "languages", "expected"),
    [
        ({"en": "Example", "de": "Beispiel"}, ["de", "en"], "Beispiel"),
        ({"en": "Example", "de": "Beispiel"}, ["fr", "en"], "Example"),
        ({"de": "Beispiel", "en": "Example"}, ["fr"], "Beispiel"),
        ({}, ["en"], ""),
        (None, ["en"], ""),
    ],
)
def test_get_localized(values: dict[str, str] | None, languages: list[str], expected: str) -> None:
    assert get_localized(values, languages) == expected


def test_should_deserialize_manifest() -> None:
    info = from_array(PackageInfo, MANIFEST)

    assert info.identifier == "@local/example"
    assert info.author == "Jane Doe"
    assert info.url is None
    assert info.get_localized_name(["de"]) == "Beispiel"
    assert info.get_localized_description(["de"]) == "An example package."


def test_should_accept_database_column_names() -> None:
    row = {**MANIFEST, "shortname": "from_db"}
    del row["short_name"]

    assert from_array(PackageInfo, row).short_name == "from_db"


def test_should_deserialize_package_version() -> None:
    package = from_array(Package, {**MANIFEST, "package_hash": "abc", "version": "1.0.0"})

    assert isinstance(package, Package)
    assert package.hash == "abc"
    assert package.version == "1.0.0"
    assert to_array(package)["package_hash"] == "abc"


def test_missing_fields() -> None:
    version = from_array(PackageVersionSpecificInfo, {"version": "1.0.0"})

    assert version.version == "1.0.0"
    assert not hasattr(version, "hash")

    with pytest.raises(MissingFieldError):
        from_array(PackageInfo, {"namespace": "local", "name": {}, "type": "LIBRARY"})


def test_should_deserialize_versions() -> None:
    info = from_array(
        PackageVersionsInfo,
        {
            "manifest": MANIFEST,
            "versions": [{"hash": "h2", "version": "2.0.0"}, {"package_hash": "h1", "version": "1.0.0"}],
        },
    )

    assert info.manifest == from_array(PackageInfo, MANIFEST)
    assert [(version.hash, version.version) for version in info.versions] == [("h2", "2.0.0"), ("h1", "1.0.0")]
    assert info.latest == info.versions[0]

    assert to_array(info)["versions"] == [
        {"package_hash": "h2", "version": "2.0.0"},
        {"package_hash": "h1", "version": "1.0.0"},
    ]


def test_latest_of_no_versions() -> None:
    assert PackageVersionsInfo(from_array(PackageInfo, MANIFEST), []).latest is None


def test_as_localized_dict() -> None:
    info = from_array(PackageInfo, MANIFEST)

    localized = info.as_localized_dict(["de"])

    assert localized["short_name"] == "example"
    assert localized["name"] == "Beispiel"
    assert localized["description"] == "An example package."
    assert localized["icon"] is None

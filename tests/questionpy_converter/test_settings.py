#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
import pytest
from pydantic import ValidationError

from questionpy_converter import ArrayConverter, ConverterSettings


def test_defaults() -> None:
    settings = ConverterSettings()

    assert settings.unknown_variant == "fallback"
    assert settings.max_depth == 64


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QPY_CONVERTER_UNKNOWN_VARIANT", "ERROR")
    monkeypatch.setenv("QPY_CONVERTER_MAX_DEPTH", "5")

    converter = ArrayConverter()

    assert converter.settings.unknown_variant == "error"
    assert converter.settings.max_depth == 5


@pytest.mark.parametrize("max_depth", [0, -1])
def test_max_depth_must_be_positive(max_depth: int) -> None:
    with pytest.raises(ValidationError, match="must be at least 1"):
        ConverterSettings(max_depth=max_depth)


def test_unknown_variant_must_be_known() -> None:
    with pytest.raises(ValidationError):
        ConverterSettings(unknown_variant="ignore")  # type: ignore[arg-type]

from __future__ import annotations

import pytest
from requests.structures import CaseInsensitiveDict

from services.configuration_document import decode_document
from services.configuration_mutator import ConfigurationMutationError, section_checkpoint, set_path


def test_overwrites_existing_leaf_keeping_stored_casing() -> None:
    document = decode_document('{"Logging": {"LogLevel": {"Default": "Warning"}}}')

    set_path(document, ["logging", "LOGLEVEL", "default"], "Information")

    assert document["Logging"]["LogLevel"]["Default"] == "Information"
    assert list(document) == ["Logging"]
    assert list(document["Logging"]["LogLevel"]) == ["Default"]


def test_creates_missing_sections() -> None:
    document = decode_document("{}")

    set_path(document, ["A", "B", "C"], "x")

    assert isinstance(document["A"], CaseInsensitiveDict)
    assert document["a"]["b"]["c"] == "x"
    assert list(document["A"]["B"]) == ["C"]


def test_replaces_scalar_or_array_in_the_way() -> None:
    document = decode_document('{"A": "scalar", "L": [1, 2]}')

    set_path(document, ["A", "B"], "1")
    set_path(document, ["L", "0"], "2")

    assert document["A"]["B"] == "1"
    assert dict(document["L"].items()) == {"0": "2"}


def test_value_is_stored_as_raw_string() -> None:
    document = decode_document('{"Flags": {"Max": 10}}')

    set_path(document, ["Flags", "Max"], "25")

    assert document["Flags"]["Max"] == "25"


def test_single_segment_sets_top_level() -> None:
    document = decode_document('{"Name": "old"}')
    set_path(document, ["name"], "new")
    assert dict(document.items()) == {"Name": "new"}


def test_empty_segments_raise() -> None:
    with pytest.raises(ConfigurationMutationError):
        set_path(CaseInsensitiveDict(), [], "x")


def test_unexpected_errors_surface_as_mutation_error() -> None:
    class ReadOnly(CaseInsensitiveDict):
        frozen = False

        def __setitem__(self, key, value):
            if self.frozen:
                raise RuntimeError("read only")
            super().__setitem__(key, value)

    document = ReadOnly({"A": "1"})
    document.frozen = True

    with pytest.raises(ConfigurationMutationError) as exc_info:
        set_path(document, ["A"], "2")

    assert exc_info.value.path == "A"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_checkpoint_restores_touched_section() -> None:
    document = decode_document('{"Logging": {"Level": "Warning"}, "Other": 1}')
    restore = section_checkpoint(document, "logging")

    set_path(document, ["Logging", "Level", "Deep"], "x")
    restore()

    assert document["Logging"] == {"Level": "Warning"}
    assert document["Other"] == 1


def test_checkpoint_discards_section_that_did_not_exist() -> None:
    document = decode_document('{"Logging": {}}')
    discard = section_checkpoint(document, "New")

    set_path(document, ["new", "Key"], "x")
    discard()

    assert list(document) == ["Logging"]

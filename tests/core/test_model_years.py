from __future__ import annotations

import pytest

from macscan_core.diagnostics.hardware import (
    MODEL_YEARS,
    extract_year,
    is_apple_silicon,
    is_intel,
    is_soldered,
    is_soldered_model,
)


@pytest.mark.core
def test_extract_year_prefers_explicit_year():
    assert extract_year("MacBook Pro (Retina, 13-inch, Early 2015)") == 2015
    assert extract_year("MacBookPro11,1 2019") == 2019


@pytest.mark.core
@pytest.mark.parametrize(
    "model, year",
    [
        ("MacBookPro11,1", 2013),
        ("MacBookPro11,4", 2015),
        ("MacBookPro12,1", 2015),
        ("MacBookPro14,3", 2017),
        ("MacBookAir7,2", 2015),
        ("MacBook9,1", 2016),
        ("iMac14,2", 2013),
        ("iMacPro1,1", 2017),
        ("Macmini7,1", 2014),
        ("Mac14,2", 2022),
    ],
)
def test_extract_year_from_table(model, year):
    assert extract_year(model) == year


@pytest.mark.core
def test_extract_year_token_boundaries():
    # "MacBookPro1" must not shadow "MacBookPro11"; "Mac14" must not hit "iMac14".
    assert extract_year("MacBookPro1,1") is None
    assert extract_year("iMac14,2") == 2013
    assert extract_year("MacBookAir10,1") == 2020
    assert extract_year("MacBook10,1") == 2017


@pytest.mark.core
@pytest.mark.parametrize("value", [None, "", "PowerBook G4", 42, ["MacBookPro11,1"]])
def test_extract_year_unknown_is_none(value):
    assert extract_year(value) is None
    assert extract_year(value) is None


@pytest.mark.core
def test_every_table_token_resolves_to_its_year():
    for token, year in MODEL_YEARS:
        model = token if "," in token else f"{token},1"
        assert extract_year(model) == year, token


@pytest.mark.core
def test_soldered_detection():
    assert is_soldered_model("MacBookAir7,2")
    assert is_soldered_model("MacBookPro11,1")
    assert not is_soldered_model("MacBookPro9,2")
    assert not is_soldered_model("MacBookPro1,1")
    assert not is_soldered_model("iMac14,2")
    assert not is_soldered_model(None)
    assert is_soldered("MacBookPro9,2", 2012)
    assert not is_soldered("MacBookPro9,2", None)
    assert not is_soldered(None, 2019)


@pytest.mark.core
def test_architecture_and_cpu_markers():
    assert is_intel("x86_64")
    assert is_intel("Intel")
    assert not is_intel("arm64")
    assert not is_intel(None)
    assert is_apple_silicon("Apple M2 Pro")
    assert not is_apple_silicon("Intel(R) Core(TM) i7")

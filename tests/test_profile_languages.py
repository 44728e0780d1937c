from __future__ import annotations

import pytest

from timeline_service.profile_languages import (
    MAX_PROFILE_LANGUAGES,
    decode_profile_languages,
    encode_profile_languages,
)


def test_decode_trims_and_drops_empty_tokens():
    assert decode_profile_languages(" Python ,, Rust ,") == ["Python", "Rust"]


def test_decode_dedupes_case_insensitively_keeping_first_spelling():
    assert decode_profile_languages("TypeScript, typescript, Go, GO") == ["TypeScript", "Go"]


def test_decode_drops_overlong_tokens():
    assert decode_profile_languages("Python, " + "x" * 25 + ", " + "y" * 24) == ["Python", "y" * 24]


def test_decode_caps_entries():
    raw = ",".join(f"lang{i}" for i in range(12))
    result = decode_profile_languages(raw)
    assert len(result) == MAX_PROFILE_LANGUAGES
    assert result[0] == "lang0"
    assert result[-1] == "lang7"


@pytest.mark.parametrize("raw", [None, "", "  ,  "])
def test_decode_empty(raw):
    assert decode_profile_languages(raw) == []


def test_encode_joins_normalized_list():
    assert encode_profile_languages([" Rust", "rust", "Go "]) == "Rust, Go"
    assert encode_profile_languages("Rust,Go,,rust") == "Rust, Go"
    assert encode_profile_languages(None) == ""


@pytest.mark.parametrize("raw", [
    "Python, python, Rust,,  Go  ",
    ",".join(f"L{i}" for i in range(20)),
    "a" * 30 + ",Kotlin",
])
def test_decode_is_idempotent_after_encoding(raw):
    once = decode_profile_languages(raw)
    assert decode_profile_languages(encode_profile_languages(once)) == once

"""Slug derivation and tag normalization."""

import pytest

from conduit.errors import ValidationFailedError
from conduit.services.articles import normalize_tags, slug_candidate, slugify


class TestSlugify:
    def test_lowercase_hyphenated(self):
        assert slugify("How to Train Your Dragon") == "how-to-train-your-dragon"

    def test_accents_folded_and_quotes_dropped(self):
        assert slugify("Crème Brûlée: Don't \"Panic\"") == "creme-brulee-dont-panic"

    def test_runs_of_punctuation_collapse(self):
        assert slugify("  Hello,   World!!  ") == "hello-world"

    def test_truncated_without_trailing_hyphen(self):
        slug = slugify("An extremely long title that keeps going well past the limit")
        assert len(slug) <= 36
        assert not slug.endswith("-")
        assert slug.startswith("an-extremely-long-title")

    def test_no_alphanumerics_gives_empty(self):
        assert slugify("!!! ???") == ""


class TestSlugCandidate:
    def test_first_attempt_is_base(self):
        assert slug_candidate("dragons", 1) == "dragons"

    def test_later_attempts_add_suffix(self):
        assert slug_candidate("dragons", 2) == "dragons-2"
        assert slug_candidate("dragons", 13) == "dragons-13"

    def test_suffix_fits_the_length_limit(self):
        base = "a" * 36
        candidate = slug_candidate(base, 20)
        assert len(candidate) == 36
        assert candidate.endswith("-20")


class TestNormalizeTags:
    def test_trims_dedupes_and_keeps_order(self):
        assert normalize_tags([" dragons", "training", "", "dragons ", "  "]) == [
            "dragons",
            "training",
        ]

    def test_none_is_empty(self):
        assert normalize_tags(None) == []

    def test_plain_string_rejected(self):
        with pytest.raises(ValidationFailedError):
            normalize_tags("dragons")

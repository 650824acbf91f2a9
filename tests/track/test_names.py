"""Tests for track name normalization."""

from __future__ import annotations

import pytest

from telemetry_kpi.track.names import (
    DEFAULT_TRACK_SLUG,
    TrackNameNormalizer,
    normalize_track_name,
)

_NAMES = [
    "Brands Hatch",
    "Brands Hatch Indy",
    "Brands Hatch GP 2024-05-01",
    "Donington Park National",
    "Silverstone International 3",
    "Snetterton 300",
    "Oulton Park Club",
    "Cadwell Park",
    "Knockhill 2",
    "  Mondello   Park  ",
    "track_7",
    "123",
    "",
    None,
]


class TestNormalizeTrackName:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Brands Hatch Indy", "brands_hatch"),
            ("BRANDS HATCH GP", "brands_hatch"),
            ("Donington Park National", "donington"),
            ("Silverstone International", "silverstone"),
            ("Snetterton 300", "snetterton"),
            ("Oulton Park Club", "oulton_park"),
            ("Cadwell Park 2024-06-01", "cadwell_park"),
            ("Knockhill 2", "knockhill"),
        ],
    )
    def test_known_names(self, name, expected):
        assert normalize_track_name(name) == expected

    @pytest.mark.parametrize("name", ["", None, "   "])
    def test_empty_input_gives_default_slug(self, name):
        assert normalize_track_name(name) == DEFAULT_TRACK_SLUG

    def test_digits_only_gives_default_slug(self):
        assert normalize_track_name("123") == DEFAULT_TRACK_SLUG

    @pytest.mark.parametrize("name", _NAMES)
    def test_never_empty(self, name):
        assert normalize_track_name(name)

    @pytest.mark.parametrize("name", _NAMES)
    def test_idempotent(self, name):
        once = normalize_track_name(name)
        assert normalize_track_name(once) == once


class TestTrackNameNormalizer:
    def test_custom_alias_table(self):
        normalizer = TrackNameNormalizer(aliases={"spa": "spa_francorchamps"}, default_slug="spa")
        assert normalizer.normalize("Spa-Francorchamps GP") == "spa_francorchamps"
        assert normalizer.normalize("Brands Hatch") == "brands_hatch"
        assert normalizer.normalize(None) == "spa"

    def test_first_matching_alias_wins(self):
        normalizer = TrackNameNormalizer(aliases={"park": "first", "oulton": "second"})
        assert normalizer.normalize("Oulton Park") == "first"

    def test_empty_default_slug_rejected(self):
        with pytest.raises(ValueError):
            TrackNameNormalizer(default_slug="")

    def test_alias_table_is_read_only(self):
        normalizer = TrackNameNormalizer()
        with pytest.raises(TypeError):
            normalizer.aliases["x"] = "y"

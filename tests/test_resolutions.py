"""
Tests for core/resolutions.py - Resolution catalog and covering lookup.
"""

import logging

import pytest

from core.resolutions import (
    DEFAULT_RESOLUTIONS,
    ConfigurationError,
    Resolution,
    ResolutionCatalog,
    parse_resolutions,
)


SMALL_LADDER = [[160, 120], [320, 240], [640, 480]]


class TestCatalogConstruction:
    """Test catalog validation at construction."""

    def test_default_ladder(self):
        """Test default catalog is the 8-tier 4:3 ladder."""
        catalog = ResolutionCatalog()
        assert len(catalog) == 8
        assert catalog.smallest == Resolution(160, 120)
        assert catalog.largest == Resolution(1280, 960)
        assert catalog.aspect == (160, 120)

    def test_accepts_plain_lists(self):
        """Test [width, height] pairs are converted to Resolution."""
        catalog = ResolutionCatalog(SMALL_LADDER)
        assert list(catalog) == [Resolution(160, 120), Resolution(320, 240), Resolution(640, 480)]

    def test_empty_catalog_rejected(self):
        """Test an empty catalog is a configuration error."""
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([])

    def test_wrong_arity_rejected(self):
        """Test an entry that is not a width/height pair is a configuration error."""
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([[160, 120, 1], [320, 240]])
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([[160]])

    def test_unsorted_catalog_rejected(self):
        """Test descending entries are rejected."""
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([[320, 240], [160, 120]])

    def test_duplicate_entries_rejected(self):
        """Test the ladder must be strictly ascending."""
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([[160, 120], [160, 120]])

    def test_mismatched_aspect_rejected(self):
        """Test entries with a different aspect ratio are rejected."""
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([[160, 120], [320, 180]])

    def test_non_positive_rejected(self):
        """Test zero or negative dimensions are rejected."""
        with pytest.raises(ConfigurationError):
            ResolutionCatalog([[0, 0], [160, 120]])

    def test_configuration_error_is_value_error(self):
        """Test callers can catch configuration errors as ValueError."""
        assert issubclass(ConfigurationError, ValueError)


class TestSmallestCovering:
    """Test smallest_covering lookup."""

    def test_exact_match(self):
        """Test a target equal to an entry returns that entry."""
        catalog = ResolutionCatalog(SMALL_LADDER)
        assert catalog.smallest_covering(320, 240) == Resolution(320, 240)

    def test_between_entries(self):
        """Test a target between entries rounds up."""
        catalog = ResolutionCatalog(SMALL_LADDER)
        assert catalog.smallest_covering(333.3, 250) == Resolution(640, 480)

    def test_zero_target_returns_smallest(self):
        """Test (0, 0) matches the smallest entry."""
        catalog = ResolutionCatalog(SMALL_LADDER)
        assert catalog.smallest_covering(0, 0) == Resolution(160, 120)

    def test_both_dimensions_must_cover(self):
        """Test a tall target needs the height to be covered too."""
        catalog = ResolutionCatalog(SMALL_LADDER)
        assert catalog.smallest_covering(100, 200) == Resolution(320, 240)

    def test_oversized_target_falls_back_to_largest(self, caplog):
        """Test an oversized target returns the largest entry and logs."""
        catalog = ResolutionCatalog(SMALL_LADDER)
        with caplog.at_level(logging.WARNING):
            result = catalog.smallest_covering(700, 500)
        assert result == Resolution(640, 480)
        assert "scaled up" in caplog.text

    def test_result_is_unique_minimal_cover(self):
        """Test the result covers the target and no smaller entry does."""
        catalog = ResolutionCatalog()
        entries = list(catalog)
        for target_w in range(0, 1400, 37):
            for target_h in range(0, 1100, 41):
                result = catalog.smallest_covering(target_w, target_h)
                covering = [r for r in entries if r.width >= target_w and r.height >= target_h]
                if covering:
                    assert result == covering[0]
                else:
                    assert result == catalog.largest


class TestParseResolutions:
    """Test parsing resolution ladders from config strings."""

    def test_comma_separated(self):
        """Test comma separated WxH values."""
        assert parse_resolutions("160x120, 320x240") == [Resolution(160, 120), Resolution(320, 240)]

    def test_newline_separated_and_uppercase(self):
        """Test newline separated and upper-case X."""
        assert parse_resolutions("160X120\n320x240\n") == [Resolution(160, 120), Resolution(320, 240)]

    def test_malformed_entry(self):
        """Test malformed entries raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            parse_resolutions("160x120, big")

    def test_default_ladder_round_trips_through_str(self):
        """Test str(Resolution) is the WxH form parse_resolutions accepts."""
        text = ", ".join(str(r) for r in DEFAULT_RESOLUTIONS)
        assert parse_resolutions(text) == list(DEFAULT_RESOLUTIONS)

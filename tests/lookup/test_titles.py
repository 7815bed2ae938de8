"""Tests for retail listing title cleaning."""

import pytest

from lookup.normalizers.titles import (
    clean_game_title,
    derive_format_from_platforms,
    extract_game_format,
    extract_platform,
    extract_year,
    find_best_match,
    infer_format,
    match_score,
    normalize_title,
)


class TestNormalizeTitle:
    """Tests for movie title normalization."""

    def test_strips_format_and_year(self):
        """Test the canonical Blu-ray listing example."""
        assert normalize_title("The Matrix (Blu-ray) (1999)") == "The Matrix"
        assert extract_year("The Matrix (Blu-ray) (1999)") == 1999

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Akira [Widescreen] - DVD NEW", "Akira"),
            ("Inception (4K UHD + Blu-ray + Digital)", "Inception"),
            ("  Alien   (1979)  ", "Alien"),
            ("Heat DVD", "Heat"),
            ("Jaws -", "Jaws"),
            ("Inside Out 2", "Inside Out 2"),
            ("Matrix The (DVD)", "The Matrix"),
            ("Scanner Darkly A [Widescreen]", "A Scanner Darkly"),
            ("Graduate, The (1967)", "The Graduate"),
            ("A The", "A The"),
        ],
    )
    def test_listing_noise_removed(self, raw, expected):
        """Test common listing noise is removed."""
        assert normalize_title(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "The Matrix (Blu-ray) (1999)",
            "Akira [Widescreen] - DVD NEW",
            "Blade Runner (Final Cut) (2-Disc Special Edition) [Blu-ray]",
            "Movie: - ,",
            "Matrix The (DVD)",
            "Brand New The",
            "A The",
            "",
        ],
    )
    def test_idempotent(self, raw):
        """Test normalizing twice gives the same result."""
        once = normalize_title(raw)
        assert normalize_title(once) == once

    def test_never_raises_on_bad_input(self):
        """Test odd input yields an empty title."""
        assert normalize_title(None) == ""
        assert normalize_title("   ") == ""

    def test_extract_year_absent(self):
        """Test titles without a year give None."""
        assert extract_year("The Matrix") is None
        assert extract_year(None) is None


class TestInferFormat:
    """Tests for movie format inference."""

    @pytest.mark.parametrize(
        "title,category,expected",
        [
            ("The Matrix (Blu-ray) (1999)", None, "Blu-ray"),
            ("Dune 4K UHD", None, "4K UHD"),
            ("Heat", "Movies > DVD", "DVD"),
            ("Heat", "Movies", None),
        ],
    )
    def test_infer_format(self, title, category, expected):
        """Test format comes from the title or the category."""
        assert infer_format(title, category) == expected


class TestGameTitles:
    """Tests for game listing helpers."""

    def test_platform_and_media_removed(self):
        """Test platform and media markers are stripped."""
        assert clean_game_title("Halo 3 Legendary - Xbox 360 (Disc)") == ("Halo 3 Legendary", "")

    def test_edition_extracted(self):
        """Test a named edition is split off the title."""
        assert clean_game_title("The Witcher 3 Game of the Year Edition PS4") == (
            "The Witcher 3",
            "Game of the Year",
        )

    def test_empty_title(self):
        """Test empty input gives empty parts."""
        assert clean_game_title("") == ("", "")
        assert clean_game_title(None) == ("", "")

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Zelda (Cartridge)", "Cartridge"),
            ("Halo 3 (Disc)", "Disc"),
            ("Fortnite Digital Code", "Digital"),
            ("Tetris", ""),
        ],
    )
    def test_extract_game_format(self, title, expected):
        """Test media type markers are recognised."""
        assert extract_game_format(title) == expected

    def test_extract_platform_from_title(self):
        """Test the platform is read from the title first."""
        assert extract_platform("Halo 3 - Xbox 360") == "Xbox 360"

    def test_extract_platform_from_category(self):
        """Test category and brand are used when the title has no platform."""
        assert extract_platform("Mario Kart 8 Deluxe", category="Nintendo Switch Games") == (
            "Nintendo Switch"
        )
        assert extract_platform("Tetris") == ""

    @pytest.mark.parametrize(
        "platforms,detected,expected",
        [
            (["PlayStation 5"], "", "Blu-ray Disc"),
            (["PC (Microsoft Windows)", "Nintendo Switch"], "Nintendo Switch", "Cartridge"),
            (["PC (Microsoft Windows)"], "", "CD-ROM"),
            (["Xbox 360"], "", "DVD"),
            ([], "", ""),
        ],
    )
    def test_derive_format_from_platforms(self, platforms, detected, expected):
        """Test media format is derived from the matching platform."""
        assert derive_format_from_platforms(platforms, detected) == expected


class TestMatching:
    """Tests for search result matching."""

    def test_match_score(self):
        """Test exact, contained and partial matches score in order."""
        assert match_score("Halo 3", "halo 3") == 1.0
        assert match_score("Halo 3: ODST", "Halo 3") == 0.9
        assert match_score("Halo Wars", "Halo 3") == 0.5
        assert match_score(None, "Halo") == 0.0

    def test_find_best_match(self):
        """Test the closest name wins."""
        results = [{"name": "Halo Wars"}, {"name": "Halo 3"}, {"name": "Halo 3: ODST"}]

        assert find_best_match(results, "Halo 3") == {"name": "Halo 3"}

    def test_find_best_match_falls_back_to_first(self):
        """Test the first result is used when nothing is close."""
        results = [{"name": "Tetris"}, {"name": "Pong"}]

        assert find_best_match(results, "Halo") == {"name": "Tetris"}
        assert find_best_match([], "Halo") is None

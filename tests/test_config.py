"""Tests for flag_checker.core.config — profiles, overrides and FLAG_* environment."""

import pytest
from flag_checker.core.config import (
    PROFILES,
    ValidationConfig,
    from_env,
    get_profile,
    parse_assignments,
)
from flag_checker.core.errors import ConfigError, FlagCheckError


class TestDefaults:
    def test_published_tolerances(self):
        cfg = ValidationConfig()
        assert cfg.color_tolerance == 5
        assert cfg.ratio_tolerance == 1
        assert cfg.stripe_tolerance == 2
        assert cfg.center_tolerance == 2
        assert cfg.diameter_tolerance == 10
        assert cfg.expected_spokes == 24
        assert cfg.spoke_check == 'strict'

    def test_frozen(self):
        cfg = ValidationConfig()
        with pytest.raises(AttributeError):
            cfg.color_tolerance = 9  # type: ignore[misc]


class TestProfiles:
    def test_strict_is_default(self):
        assert get_profile('strict') == ValidationConfig()

    def test_lenient_is_looser_everywhere(self):
        strict, lenient = PROFILES['strict'], PROFILES['lenient']
        assert lenient.color_tolerance > strict.color_tolerance
        assert lenient.ratio_tolerance > strict.ratio_tolerance
        assert lenient.stripe_tolerance > strict.stripe_tolerance
        assert lenient.center_tolerance > strict.center_tolerance
        assert lenient.diameter_tolerance > strict.diameter_tolerance

    def test_unknown_profile(self):
        with pytest.raises(ConfigError, match='Unknown profile'):
            get_profile('relaxed')


class TestWithOverrides:
    def test_upper_case_name(self):
        cfg = ValidationConfig().with_overrides({'COLOR_TOLERANCE': '7.5'})
        assert cfg.color_tolerance == 7.5

    def test_lower_case_name(self):
        cfg = ValidationConfig().with_overrides({'ratio_tolerance': 3})
        assert cfg.ratio_tolerance == 3.0

    def test_original_untouched(self):
        base = ValidationConfig()
        base.with_overrides({'STRIPE_TOLERANCE': 9})
        assert base.stripe_tolerance == 2

    def test_int_fields_stay_int(self):
        cfg = ValidationConfig().with_overrides({'SEARCH_STEP': '4', 'EXPECTED_SPOKES': '24'})
        assert cfg.search_step == 4
        assert isinstance(cfg.expected_spokes, int)

    def test_int_fields_accept_whole_floats(self):
        assert ValidationConfig().with_overrides({'SVG_DPI': '150.0'}).svg_dpi == 150

    @pytest.mark.parametrize(('name', 'value'), [('EXPECTED_SPOKES', '24.7'), ('SVG_DPI', 299.9), ('SEARCH_STEP', 'inf')])
    def test_int_fields_reject_fractions(self, name, value):
        with pytest.raises(ConfigError, match='whole number'):
            ValidationConfig().with_overrides({name: value})

    def test_spoke_check(self):
        assert ValidationConfig().with_overrides({'SPOKE_CHECK': 'Advisory'}).spoke_check == 'advisory'

    def test_spoke_check_invalid(self):
        with pytest.raises(ConfigError, match='SPOKE_CHECK'):
            ValidationConfig().with_overrides({'SPOKE_CHECK': 'sometimes'})

    def test_tuple_from_comma_list(self):
        cfg = ValidationConfig().with_overrides({'EMBLEM_CHANNEL_THRESHOLD': '30, 30, 70'})
        assert cfg.emblem_channel_threshold == (30, 30, 70)

    def test_bool(self):
        assert ValidationConfig().with_overrides({'SEARCH_REFINE': 'false'}).search_refine is False

    def test_unknown_name(self):
        with pytest.raises(ConfigError, match='Unknown setting'):
            ValidationConfig().with_overrides({'COLOUR_TOLERANCE': 5})

    def test_not_a_number(self):
        with pytest.raises(ConfigError, match='must be a number'):
            ValidationConfig().with_overrides({'CENTER_TOLERANCE': 'wide'})

    def test_negative_rejected(self):
        with pytest.raises(ConfigError):
            ValidationConfig().with_overrides({'DIAMETER_TOLERANCE': -1})

    def test_search_step_at_least_one(self):
        with pytest.raises(ConfigError, match='SEARCH_STEP'):
            ValidationConfig().with_overrides({'SEARCH_STEP': 0})

    def test_config_error_is_flag_check_error(self):
        assert issubclass(ConfigError, FlagCheckError)


class TestFromEnv:
    def test_empty_env_is_strict(self):
        assert from_env({}) == ValidationConfig()

    def test_profile_from_env(self):
        assert from_env({'FLAG_PROFILE': 'lenient'}) == PROFILES['lenient']

    def test_override_on_top_of_profile(self):
        cfg = from_env({'FLAG_PROFILE': 'lenient', 'FLAG_COLOR_TOLERANCE': '9'})
        assert cfg.color_tolerance == 9
        assert cfg.ratio_tolerance == PROFILES['lenient'].ratio_tolerance

    def test_explicit_profile_beats_env(self):
        assert from_env({'FLAG_PROFILE': 'lenient'}, profile='strict') == PROFILES['strict']

    def test_unrelated_vars_ignored(self):
        assert from_env({'COLOR_TOLERANCE': '50', 'PATH': '/bin'}) == ValidationConfig()

    def test_bad_value(self):
        with pytest.raises(ConfigError):
            from_env({'FLAG_RATIO_TOLERANCE': 'abc'})


class TestParseAssignments:
    def test_pairs(self):
        assert parse_assignments(['color_tolerance=7', 'SPOKE_CHECK = advisory']) == {
            'COLOR_TOLERANCE': '7',
            'SPOKE_CHECK': 'advisory',
        }

    def test_none(self):
        assert parse_assignments(None) == {}

    def test_missing_equals(self):
        with pytest.raises(ConfigError, match='NAME=VALUE'):
            parse_assignments(['COLOR_TOLERANCE'])

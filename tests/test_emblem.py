"""Tests for flag_checker.stages.emblem and flag_checker.stages.spokes."""

import numpy as np
import pytest
from flag_checker.core.config import ValidationConfig
from flag_checker.core.errors import DetectionFailure
from flag_checker.core.types import BandTriple, EmblemGeometry, Raster, Run
from flag_checker.stages.bands import detect_bands
from flag_checker.stages.emblem import emblem_mask, locate_emblem, measure_radius, sample_mask, search_radii
from flag_checker.stages.spokes import correct_spoke_count, count_spokes, rescale_factor, ring_transitions

WHITE = (255, 255, 255)


def _bands(raster) -> BandTriple:
    _runs, bands = detect_bands(raster, ValidationConfig())
    assert bands is not None
    return bands


class TestEmblemMask:
    def test_navy_only(self, flag):
        mask = emblem_mask(flag, ValidationConfig())
        assert mask[300, 450]
        assert not mask[10, 10]
        assert not mask[250, 100]
        assert not mask[550, 100]


class TestSampleMask:
    def test_out_of_bounds_is_false(self):
        mask = np.ones((10, 10), dtype=bool)
        hits = sample_mask(mask, np.array([-1.0, 5.0, 10.0, 9.4]), np.array([5.0, 5.0, 5.0, 9.4]))
        assert hits.tolist() == [False, True, False, True]


class TestLocateEmblem:
    def test_centred(self, flag):
        cfg = ValidationConfig()
        emblem = locate_emblem(flag, _bands(flag), cfg)
        assert emblem.center_x == pytest.approx(450, abs=1)
        assert emblem.center_y == pytest.approx(300, abs=1)
        assert abs(emblem.offset_x) <= 1
        assert abs(emblem.offset_y) <= 1
        assert emblem.diameter == pytest.approx(150, abs=4)

    def test_shifted(self, make_flag):
        raster = make_flag(centre=(490, 310))
        emblem = locate_emblem(raster, _bands(raster), ValidationConfig())
        assert emblem.offset_x == pytest.approx(40, abs=1)
        assert emblem.offset_y == pytest.approx(10, abs=1)

    @pytest.mark.parametrize('radius', [68, 70, 80])
    def test_rim_size_inside_tolerance(self, make_flag, radius):
        raster = make_flag(radius=radius)
        emblem = locate_emblem(raster, _bands(raster), ValidationConfig())
        assert emblem.center_x == pytest.approx(450, abs=1)
        assert emblem.center_y == pytest.approx(300, abs=1)
        assert emblem.radius == pytest.approx(radius, abs=1.5)

    def test_no_emblem(self, make_flag):
        raster = make_flag(colours=((255, 153, 51), WHITE, (19, 136, 8), WHITE))
        with pytest.raises(DetectionFailure, match='not found'):
            locate_emblem(raster, _bands(raster), ValidationConfig())

    def test_step_one_without_refinement(self, flag):
        cfg = ValidationConfig(search_step=1, search_refine=False)
        emblem = locate_emblem(flag, _bands(flag), cfg)
        assert emblem.center_x == pytest.approx(450, abs=1)

    def test_tiny_band(self):
        raster = Raster(np.full((3, 3, 3), 255, dtype=np.uint8))
        bands = BandTriple(Run('top', 0, 0), Run('middle', 1, 1), Run('bottom', 2, 2))
        with pytest.raises(DetectionFailure):
            locate_emblem(raster, bands, ValidationConfig())


class TestSearchRadii:
    def test_cover_tolerance_window(self):
        radii = search_radii(75, ValidationConfig())
        assert radii[0] == pytest.approx(65.5)
        assert radii[-1] >= 81.5
        assert np.all(np.diff(radii) == pytest.approx(2.0))

    def test_tight_tolerance_keeps_expected_ring(self):
        radii = search_radii(75, ValidationConfig(diameter_tolerance=0))
        assert radii.tolist() == pytest.approx([73.0, 75.0])


class TestMeasureRadius:
    def test_filled_disc(self):
        yy, xx = np.mgrid[0:101, 0:101]
        mask = np.hypot(xx - 50, yy - 50) <= 30
        assert measure_radius(mask, 50, 50, 45, 5) == pytest.approx(30, abs=1)

    def test_empty(self):
        assert measure_radius(np.zeros((20, 20), dtype=bool), 10, 10, 8, 5) is None


class TestSpokes:
    def test_twenty_four(self, flag):
        cfg = ValidationConfig()
        mask = emblem_mask(flag, cfg)
        estimate = count_spokes(mask, locate_emblem(flag, _bands(flag), cfg, mask=mask), cfg)
        assert estimate.ring_counts == (24, 24, 24)
        assert estimate.raw == 24
        assert estimate.detected == 24
        assert not estimate.rescaled

    def test_eight(self, make_flag):
        raster = make_flag(spokes=8)
        cfg = ValidationConfig()
        mask = emblem_mask(raster, cfg)
        estimate = count_spokes(mask, locate_emblem(raster, _bands(raster), cfg, mask=mask), cfg)
        assert estimate.detected == 8
        assert not estimate.rescaled

    @pytest.mark.parametrize(('spokes', 'factor'), [(12, 2), (48, 0.5)])
    def test_half_and_double_are_rescaled(self, make_flag, spokes, factor):
        raster = make_flag(spokes=spokes)
        cfg = ValidationConfig()
        mask = emblem_mask(raster, cfg)
        estimate = count_spokes(mask, locate_emblem(raster, _bands(raster), cfg, mask=mask), cfg)
        assert estimate.raw == spokes
        assert estimate.detected == spokes * factor == 24
        assert estimate.rescaled

    def test_spoke_at_zero_degrees_counted_once(self):
        yy, xx = np.mgrid[0:41, 0:41]
        mask = (np.abs(yy - 20) <= 1) & (xx > 20)
        assert ring_transitions(mask, 20, 20, 15, 1) == 1

    def test_empty_mask(self):
        mask = np.zeros((50, 50), dtype=bool)
        emblem = EmblemGeometry(center_x=25, center_y=25, radius=20, offset_x=0, offset_y=0)
        estimate = count_spokes(mask, emblem, ValidationConfig())
        assert estimate.raw == 0
        assert estimate.detected == 0


class TestCorrectSpokeCount:
    @pytest.mark.parametrize(
        ('raw', 'expected'),
        [
            (24, 24),
            (22, 22),
            (48, 24),  # every spoke seen twice
            (40, 20),
            (12, 24),  # spokes thinner than the sampling step
            (30, 28),  # clamped into the plausible band
            (17, 20),
            (8, 8),
            (100, 100),
            (0, 0),
        ],
    )
    def test_correction(self, raw, expected):
        assert correct_spoke_count(raw, 24, 4) == expected

    @pytest.mark.parametrize(('raw', 'factor'), [(24, 1.0), (48, 0.5), (12, 2.0), (30, 1.0), (8, 1.0), (0, 1.0)])
    def test_rescale_factor(self, raw, factor):
        assert rescale_factor(raw, 24, 4) == factor

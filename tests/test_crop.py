"""Tests for flag_checker.stages.crop and the colour-presence gate."""

import numpy as np
import pytest
from conftest import render_flag
from flag_checker.core.config import ValidationConfig
from flag_checker.core.errors import NotTargetImageError
from flag_checker.core.types import Raster
from flag_checker.stages.bands import detect_bands
from flag_checker.stages.crop import content_box, crop_to_content, flag_pixel_mask
from flag_checker.stages.presence import colour_presence, ensure_flag_colours


class TestFlagPixelMask:
    def test_white_never_counts(self):
        raster = Raster(np.full((20, 30, 3), 255, dtype=np.uint8))
        assert not flag_pixel_mask(raster, ValidationConfig()).any()

    def test_saffron_counts(self):
        raster = Raster(np.full((20, 30, 3), (255, 153, 51), dtype=np.uint8))
        assert flag_pixel_mask(raster, ValidationConfig()).all()

    def test_grey_never_counts(self):
        raster = Raster(np.full((20, 30, 3), 100, dtype=np.uint8))
        assert not flag_pixel_mask(raster, ValidationConfig()).any()


class TestCropToContent:
    def test_full_flag_uncropped(self, flag):
        cropped, box = crop_to_content(flag, ValidationConfig())
        assert box is None
        assert cropped is flag

    def test_margins_removed(self, make_flag):
        raster = make_flag(pad=40)
        cropped, box = crop_to_content(raster, ValidationConfig())
        assert box == (38, 38, 942, 642)
        assert (cropped.width, cropped.height) == (904, 604)

    def test_box_clamped_to_image(self, make_flag):
        raster = make_flag(pad=1)
        _cropped, box = crop_to_content(raster, ValidationConfig())
        # 900/902 still counts as full coverage
        assert box is None
        assert content_box(raster, ValidationConfig()) == (1, 1, 901, 601)

    def test_no_flag_pixels(self):
        raster = Raster(np.full((20, 30, 3), 255, dtype=np.uint8))
        cropped, box = crop_to_content(raster, ValidationConfig())
        assert box is None
        assert cropped is raster

    def test_band_triple_preserved_up_to_offset(self, flag, make_flag):
        cfg = ValidationConfig()
        _runs, plain = detect_bands(flag, cfg)
        cropped, _box = crop_to_content(make_flag(pad=40, background=(250, 250, 250)), cfg)
        _runs, padded = detect_bands(cropped, cfg)
        assert plain is not None and padded is not None
        assert [r.height for r in padded.runs()] == [r.height for r in plain.runs()]
        offsets = {p.start - q.start for p, q in zip(padded.runs(), plain.runs())}
        assert offsets == {2}


class TestColourPresence:
    def test_flag_has_all_band_colours(self, flag):
        presence = colour_presence(flag, ValidationConfig())
        assert presence['saffron'] > 0.3
        assert presence['white'] > 0.2
        assert presence['green'] > 0.3

    def test_grey_is_not_a_flag(self):
        raster = Raster(np.full((60, 90, 3), 128, dtype=np.uint8))
        with pytest.raises(NotTargetImageError, match='Not a flag image'):
            ensure_flag_colours(raster, ValidationConfig())

    def test_single_band_colour_is_enough(self):
        grey = (128, 128, 128)
        raster = Raster(render_flag(width=90, height=60, colours=(grey, grey, (19, 136, 8), (0, 0, 128))))
        presence = ensure_flag_colours(raster, ValidationConfig())
        assert presence['green'] > 0

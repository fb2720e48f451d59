"""Shared types for flag-tool: Raster, Run, BandTriple, EmblemGeometry, results, Check."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Literal

import numpy as np
from PIL import Image

from flag_checker.core.palette import Color

if TYPE_CHECKING:
    from flag_checker.core.config import ValidationConfig
    from flag_checker.core.report import ReportBuilder

Severity = Literal['none', 'minor', 'major']
BandLabel = Literal['top', 'middle', 'bottom']

BAND_ORDER: tuple[BandLabel, BandLabel, BandLabel] = ('top', 'middle', 'bottom')


@dataclass(frozen=True, eq=False)
class Raster:
    """Decoded image as an immutable H×W×3 uint8 array."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
            raise ValueError(f'Raster needs an H×W×3 array, got shape {self.pixels.shape}')
        arr = np.ascontiguousarray(self.pixels, dtype=np.uint8)
        arr.setflags(write=False)
        object.__setattr__(self, 'pixels', arr)

    @classmethod
    def from_image(cls, image: Image.Image) -> Raster:
        return cls(np.array(image.convert('RGB')))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def pixel(self, x: int, y: int) -> Color | None:
        """Colour at (x, y), or None when outside the image."""
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return None
        r, g, b = self.pixels[y, x]
        return (int(r), int(g), int(b))

    def crop(self, box: tuple[int, int, int, int]) -> Raster:
        """Crop to (x1, y1, x2, y2), exclusive right/bottom edges."""
        x1, y1, x2, y2 = box
        return Raster(self.pixels[y1:y2, x1:x2])


@dataclass(frozen=True)
class Run:
    """Maximal span of rows sharing one band label. `end` is inclusive."""

    label: BandLabel
    start: int
    end: int

    @property
    def height(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class BandTriple:
    """Three adjacent runs labelled top, middle, bottom."""

    top: Run
    middle: Run
    bottom: Run

    def __post_init__(self) -> None:
        runs = (self.top, self.middle, self.bottom)
        if tuple(r.label for r in runs) != BAND_ORDER:
            raise ValueError(f'Runs out of order: {[r.label for r in runs]}')
        for upper, lower in zip(runs, runs[1:]):
            if upper.end + 1 != lower.start:
                raise ValueError(f'Runs not contiguous: {upper} / {lower}')

    @property
    def total(self) -> int:
        return self.top.height + self.middle.height + self.bottom.height

    def runs(self) -> tuple[Run, Run, Run]:
        return (self.top, self.middle, self.bottom)


@dataclass(frozen=True)
class EmblemGeometry:
    """Located emblem, in pixel coordinates of the analysed raster."""

    center_x: float
    center_y: float
    radius: float
    offset_x: float  # from the image's horizontal centre
    offset_y: float  # from the middle band's vertical centre
    ring_hits: int = 0
    ring_samples: int = 0

    @property
    def diameter(self) -> float:
        return 2.0 * self.radius


@dataclass(frozen=True)
class SpokeEstimate:
    ring_counts: tuple[int, ...]
    raw: int
    detected: int
    # True when the raw count was halved or doubled to reach `detected`
    rescaled: bool = False


@dataclass(frozen=True)
class Pass:
    """A criterion that met its tolerance."""

    message: str
    details: dict[str, Any] = field(default_factory=dict)

    status: ClassVar[str] = 'pass'
    severity: ClassVar[Severity] = 'none'
    passed: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        return {'status': self.status, **self.details, 'message': self.message, 'severity': self.severity}


@dataclass(frozen=True)
class Fail:
    """A criterion that missed its tolerance, or could not be evaluated.

    `reason` is the one-line sentence that goes into the summary.
    """

    message: str
    reason: str
    severity: Severity = 'major'
    details: dict[str, Any] = field(default_factory=dict)
    tip: str | None = None

    status: ClassVar[str] = 'fail'
    passed: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        out = {'status': self.status, **self.details, 'message': self.message, 'severity': self.severity}
        if self.tip:
            out['tip'] = self.tip
        return out


CriterionResult = Pass | Fail


@dataclass(frozen=True)
class Summary:
    status: str
    reasons: tuple[str, ...]
    tip: str

    def to_dict(self) -> dict[str, Any]:
        return {'status': self.status, 'reasons': list(self.reasons), 'tip': self.tip}


@dataclass(frozen=True)
class ValidationReport:
    """Final verdict for one image. Built once by ReportBuilder.build()."""

    summary: Summary
    aspect_ratio: CriterionResult
    colors: Mapping[str, CriterionResult]
    stripe_proportion: CriterionResult
    chakra_position: CriterionResult
    chakra_spokes: CriterionResult

    def __post_init__(self) -> None:
        object.__setattr__(self, 'colors', MappingProxyType(dict(self.colors)))

    @property
    def passed(self) -> bool:
        return self.summary.status == 'pass'

    def criteria(self) -> Iterator[tuple[str, CriterionResult]]:
        """All criteria in evaluation order; colours as 'colors.<name>'."""
        yield 'aspect_ratio', self.aspect_ratio
        for name, result in self.colors.items():
            yield f'colors.{name}', result
        yield 'stripe_proportion', self.stripe_proportion
        yield 'chakra_position', self.chakra_position
        yield 'chakra_spokes', self.chakra_spokes

    def to_dict(self) -> dict[str, Any]:
        return {
            'summary': self.summary.to_dict(),
            'aspect_ratio': self.aspect_ratio.to_dict(),
            'colors': {name: result.to_dict() for name, result in self.colors.items()},
            'stripe_proportion': self.stripe_proportion.to_dict(),
            'chakra_position': self.chakra_position.to_dict(),
            'chakra_spokes': self.chakra_spokes.to_dict(),
        }


@dataclass
class AnalysisContext:
    """Everything the checks read: the cropped raster plus stage outputs.

    A detection that failed leaves its field None and explains why in the
    matching *_error field.
    """

    raster: Raster
    config: ValidationConfig
    crop_box: tuple[int, int, int, int] | None = None
    bands: BandTriple | None = None
    bands_error: str | None = None
    emblem: EmblemGeometry | None = None
    emblem_error: str | None = None
    spokes: SpokeEstimate | None = None
    spokes_error: str | None = None


class Check:
    """A self-registering validation criterion.

    Usage in a check module:

        check = Check(name='aspect_ratio', slots=('aspect_ratio',), help='3:2 aspect ratio')

        @check.run
        def run(ctx, report):
            ...

    `slots` names the report entries the check fills, so the pipeline can
    mark them failed if the check itself raises.
    """

    def __init__(self, name: str, slots: tuple[str, ...], help: str = '', order: int = 100):
        self.name = name
        self.slots = slots
        self.help = help
        self.order = order
        self._run_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def execute(self, ctx: AnalysisContext, report: ReportBuilder) -> None:
        """Execute the check's run function."""
        if self._run_fn is None:
            raise RuntimeError(f'Check {self.name} has no run function')
        self._run_fn(ctx, report)

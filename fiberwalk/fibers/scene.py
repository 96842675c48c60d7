"""
Scene - configuration record and fiber assembly

SceneConfig is what a caller (CLI, window, test) fills in. build_scene()
validates it, resolves strategy names through the registries, builds the
refraction field and seeds every fiber with randomized parameters. Nothing
is scheduled here; FiberController does that.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from PyQt5.QtGui import QImage

from ..config import (
    DEFAULT_BACKGROUND,
    DEFAULT_DISTANCE_RANGE,
    DEFAULT_FIBER_COUNT,
    DEFAULT_FRAME_MODE,
    DEFAULT_HEIGHT,
    DEFAULT_LOOP_RANGE,
    DEFAULT_NOISE_OPACITY,
    DEFAULT_STEPS_RANGE,
    DEFAULT_WIDTH,
    FRAME_HZ,
    FRAME_MODES,
    LOOP_COLORS,
    PALETTE,
    REFRACTION_DOT_CHROMA,
    REFRACTION_LINE_CHROMA,
    REFRACTION_STRENGTH,
    REFRACTION_THRESHOLD,
    SCENE_PRESETS,
)
from ..utils.logger import logger
from .colors import Rgba, parse_color
from .errors import ConfigurationError
from .fiber_state import FiberState
from .placement import PLACEMENTS, Placement, build_placement
from .refraction import RefractionField
from .renderers import RENDERERS, Renderer, build_renderer
from .rng import RandomSource, make_rng
from .transforms import TRANSFORM_NAMES, Transform, build_transform

Range = Tuple[float, float]


@dataclass
class RefractionConfig:
    """Refraction field settings. Points are normalized; None picks random ones."""

    enabled: bool = False
    p1: Optional[Tuple[float, float]] = None
    p2: Optional[Tuple[float, float]] = None
    refraction: float = REFRACTION_STRENGTH
    dot_chroma: float = REFRACTION_DOT_CHROMA
    line_chroma: float = REFRACTION_LINE_CHROMA
    threshold: float = REFRACTION_THRESHOLD
    debug: bool = False
    draw_boundary: bool = False

    def validate(self) -> None:
        if (self.p1 is None) != (self.p2 is None):
            raise ConfigurationError("Refraction needs both boundary points or neither")
        if self.p1 is not None and tuple(self.p1) == tuple(self.p2):
            raise ConfigurationError(f"Refraction boundary points coincide: {self.p1}")
        if self.threshold <= 0:
            raise ConfigurationError(f"Refraction threshold must be > 0, got {self.threshold}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "p1": list(self.p1) if self.p1 is not None else None,
            "p2": list(self.p2) if self.p2 is not None else None,
            "refraction": self.refraction,
            "dot_chroma": self.dot_chroma,
            "line_chroma": self.line_chroma,
            "threshold": self.threshold,
            "debug": self.debug,
            "draw_boundary": self.draw_boundary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RefractionConfig":
        p1 = data.get("p1")
        p2 = data.get("p2")
        return cls(
            enabled=bool(data.get("enabled", False)),
            p1=tuple(p1) if p1 is not None else None,
            p2=tuple(p2) if p2 is not None else None,
            refraction=float(data.get("refraction", REFRACTION_STRENGTH)),
            dot_chroma=float(data.get("dot_chroma", REFRACTION_DOT_CHROMA)),
            line_chroma=float(data.get("line_chroma", REFRACTION_LINE_CHROMA)),
            threshold=float(data.get("threshold", REFRACTION_THRESHOLD)),
            debug=bool(data.get("debug", False)),
            draw_boundary=bool(data.get("draw_boundary", False)),
        )


@dataclass
class SceneConfig:
    """
    Everything needed to assemble and run a scene.

    placement / transform / renderer take registry names or callables;
    transform also takes a list of names, chained in order.
    noise_tile is a pre-built noise tile drawn in place of a generated one;
    it is runtime-only and never serialized.
    """

    fiber_count: int = DEFAULT_FIBER_COUNT
    steps_range: Tuple[int, int] = DEFAULT_STEPS_RANGE
    loop_range: Tuple[int, int] = DEFAULT_LOOP_RANGE
    distance_range: Range = DEFAULT_DISTANCE_RANGE
    placement: Union[str, Placement] = 'ring'
    transform: Union[str, Sequence[str], Transform] = ('wander',)
    renderer: Union[str, Renderer] = 'segment'
    noise_opacity: Optional[float] = DEFAULT_NOISE_OPACITY
    noise_overlay_blend: bool = False
    noise_tile: Optional[QImage] = field(default=None, compare=False, repr=False)
    clear_before_draw: bool = True

    # Surface
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    background: Optional[str] = DEFAULT_BACKGROUND

    # Paint
    palette: List[str] = field(default_factory=lambda: list(PALETTE))
    loop_colors: Optional[Tuple[str, str]] = LOOP_COLORS
    line_width: Optional[float] = None  # renderer default when None

    # Scheduling
    frame_mode: str = DEFAULT_FRAME_MODE
    frame_hz: int = FRAME_HZ
    seed: Optional[int] = None

    refraction: RefractionConfig = field(default_factory=RefractionConfig)

    def validate(self) -> None:
        """Raise ConfigurationError on the first invalid setting."""
        if self.fiber_count < 1:
            raise ConfigurationError(f"fiber_count must be >= 1, got {self.fiber_count}")
        _check_range("steps_range", self.steps_range, minimum=1)
        _check_range("loop_range", self.loop_range, minimum=0)
        _check_range("distance_range", self.distance_range, minimum=0)
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Surface size must be positive, got {self.width}x{self.height}")

        if isinstance(self.placement, str) and self.placement not in PLACEMENTS:
            raise ConfigurationError(f"Unknown placement: {self.placement!r}")
        if isinstance(self.renderer, str) and self.renderer not in RENDERERS:
            raise ConfigurationError(f"Unknown renderer: {self.renderer!r}")
        for name in self.transform_names():
            if name not in TRANSFORM_NAMES:
                raise ConfigurationError(f"Unknown transform: {name!r}")
            if name == 'refract' and not self.refraction.enabled:
                raise ConfigurationError("'refract' transform needs refraction enabled")

        if self.noise_opacity is not None and not 0.0 <= self.noise_opacity <= 1.0:
            raise ConfigurationError(f"noise_opacity must be in [0, 1], got {self.noise_opacity}")
        if self.noise_tile is not None and (not isinstance(self.noise_tile, QImage)
                                            or self.noise_tile.isNull()):
            raise ConfigurationError("noise_tile must be a non-empty QImage")
        if not self.palette:
            raise ConfigurationError("palette must not be empty")
        for color in self.palette:
            parse_color(color)
        if self.loop_colors is not None:
            if len(self.loop_colors) != 2:
                raise ConfigurationError("loop_colors needs exactly two colors")
            for color in self.loop_colors:
                parse_color(color)
        if self.background is not None:
            parse_color(self.background)
        if self.line_width is not None and self.line_width <= 0:
            raise ConfigurationError(f"line_width must be > 0, got {self.line_width}")

        if self.frame_mode not in FRAME_MODES:
            raise ConfigurationError(f"Unknown frame mode: {self.frame_mode!r}")
        if self.frame_hz <= 0:
            raise ConfigurationError(f"frame_hz must be > 0, got {self.frame_hz}")
        self.refraction.validate()

    def transform_names(self) -> List[str]:
        if callable(self.transform):
            return []
        if isinstance(self.transform, str):
            return [self.transform]
        return list(self.transform)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict. Callables are stored by name."""
        return {
            "fiber_count": self.fiber_count,
            "steps_range": list(self.steps_range),
            "loop_range": list(self.loop_range),
            "distance_range": list(self.distance_range),
            "placement": _strategy_name(self.placement),
            "transform": (_strategy_name(self.transform) if callable(self.transform)
                          else self.transform_names()),
            "renderer": _strategy_name(self.renderer),
            "noise_opacity": self.noise_opacity,
            "noise_overlay_blend": self.noise_overlay_blend,
            "clear_before_draw": self.clear_before_draw,
            "width": self.width,
            "height": self.height,
            "background": self.background,
            "palette": list(self.palette),
            "loop_colors": list(self.loop_colors) if self.loop_colors is not None else None,
            "line_width": self.line_width,
            "frame_mode": self.frame_mode,
            "frame_hz": self.frame_hz,
            "seed": self.seed,
            "refraction": self.refraction.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneConfig":
        """Build from a (possibly partial) dict; missing keys keep defaults."""
        defaults = cls()
        transform = data.get("transform", defaults.transform)
        if isinstance(transform, list):
            transform = tuple(transform)
        loop_colors = data.get("loop_colors", defaults.loop_colors)
        seed = data.get("seed", defaults.seed)
        noise = data.get("noise_opacity", defaults.noise_opacity)
        line_width = data.get("line_width", defaults.line_width)
        return cls(
            fiber_count=int(data.get("fiber_count", defaults.fiber_count)),
            steps_range=_as_pair(data.get("steps_range", defaults.steps_range), int),
            loop_range=_as_pair(data.get("loop_range", defaults.loop_range), int),
            distance_range=_as_pair(data.get("distance_range", defaults.distance_range), float),
            placement=data.get("placement", defaults.placement),
            transform=transform,
            renderer=data.get("renderer", defaults.renderer),
            noise_opacity=float(noise) if noise is not None else None,
            noise_overlay_blend=bool(data.get("noise_overlay_blend", defaults.noise_overlay_blend)),
            noise_tile=data.get("noise_tile"),
            clear_before_draw=bool(data.get("clear_before_draw", defaults.clear_before_draw)),
            width=int(data.get("width", defaults.width)),
            height=int(data.get("height", defaults.height)),
            background=data.get("background", defaults.background),
            palette=list(data.get("palette", defaults.palette)),
            loop_colors=tuple(loop_colors) if loop_colors is not None else None,
            line_width=float(line_width) if line_width is not None else None,
            frame_mode=str(data.get("frame_mode", defaults.frame_mode)),
            frame_hz=int(data.get("frame_hz", defaults.frame_hz)),
            seed=int(seed) if seed is not None else None,
            refraction=RefractionConfig.from_dict(data.get("refraction", {})),
        )

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "SceneConfig":
        """Start from a named preset; keyword overrides win."""
        if name not in SCENE_PRESETS:
            raise ConfigurationError(f"Unknown scene preset: {name!r}")
        data = dict(SCENE_PRESETS[name])
        data.update(overrides)
        return cls.from_dict(data)


def _check_range(name: str, value, minimum: float) -> None:
    if len(value) != 2:
        raise ConfigurationError(f"{name} needs [min, max], got {value!r}")
    lo, hi = value
    if lo < minimum:
        raise ConfigurationError(f"{name} minimum must be >= {minimum}, got {lo}")
    if lo > hi:
        raise ConfigurationError(f"{name} is inverted: {value!r}")


def _as_pair(value, cast: Callable) -> Tuple:
    if len(value) != 2:
        raise ConfigurationError(f"Expected [min, max], got {value!r}")
    return (cast(value[0]), cast(value[1]))


def _strategy_name(value) -> str:
    if isinstance(value, str):
        return value
    return getattr(value, '__name__', 'custom')


@dataclass
class Scene:
    """A validated, seeded scene: fibers plus the strategies that drive them."""

    config: SceneConfig
    fibers: List[FiberState]
    placement: Placement
    transform: Transform
    renderer: Renderer
    field: Optional[RefractionField]
    loop_colors: Optional[Tuple[Rgba, Rgba]]


def build_scene(config: SceneConfig, surface=None,
                rng: Optional[RandomSource] = None) -> Scene:
    """
    Validate config and seed its fibers.

    surface, if given, receives refraction traces. rng defaults to a source
    seeded from config.seed.
    """
    config.validate()
    if rng is None:
        rng = make_rng(config.seed)
    width, height = config.width, config.height

    refraction_field = None
    if config.refraction.enabled:
        rc = config.refraction
        kwargs = dict(refraction=rc.refraction, dot_chroma=rc.dot_chroma,
                      line_chroma=rc.line_chroma, threshold=rc.threshold, debug=rc.debug)
        if rc.p1 is not None:
            refraction_field = RefractionField.from_normalized(rc.p1, rc.p2, width, height, **kwargs)
        else:
            refraction_field = RefractionField.random(width, height, rng, **kwargs)
        if surface is not None:
            refraction_field = refraction_field.attach(surface)
        logger.info("Refraction field built", component="SCENE",
                    details=f"{refraction_field.points[0]} -> {refraction_field.points[1]}")

    if callable(config.placement):
        placement = config.placement
    else:
        placement = build_placement(config.placement, width, height, rng)

    if callable(config.transform):
        transform = config.transform
    else:
        transform = build_transform(config.transform, width, height, rng, field=refraction_field)

    if callable(config.renderer):
        renderer = config.renderer
    else:
        renderer = build_renderer(config.renderer, config.line_width)

    palette = [parse_color(c) for c in config.palette]
    loop_colors = None
    if config.loop_colors is not None:
        loop_colors = (parse_color(config.loop_colors[0]), parse_color(config.loop_colors[1]))

    fibers = []
    for _ in range(config.fiber_count):
        state = FiberState(
            d=rng.uniform(*config.distance_range),
            color=palette[min(len(palette) - 1, int(rng.random() * len(palette)))],
            steps=rng.randint(*config.steps_range),
            loop=rng.randint(*config.loop_range),
        )
        fibers.append(placement(state, 0))

    logger.info(f"Scene assembled: {len(fibers)} fibers", component="SCENE",
                details=f"placement={_strategy_name(config.placement)} "
                        f"renderer={_strategy_name(config.renderer)}")
    return Scene(
        config=config,
        fibers=fibers,
        placement=placement,
        transform=transform,
        renderer=renderer,
        field=refraction_field,
        loop_colors=loop_colors,
    )

"""
Fiber Engine

Short directed walks ("fibers") that step across a surface, mutate under a
pluggable transform, and re-seed themselves until their loop budget runs out.
"""

from .errors import FiberwalkError, ConfigurationError, SurfaceError
from .fiber_state import FiberState
from .colors import Rgba, GradientPaint, parse_color
from .rng import XorShift32, generate_random_seed
from .refraction import RefractionField
from .scheduler import FrameScheduler
from .driver import FiberDriver, DriverState
from .scene import SceneConfig, RefractionConfig, Scene, build_scene
from .surface import QtSurface
from .controller import FiberController

__all__ = [
    'FiberwalkError',
    'ConfigurationError',
    'SurfaceError',
    'FiberState',
    'Rgba',
    'GradientPaint',
    'parse_color',
    'XorShift32',
    'generate_random_seed',
    'RefractionField',
    'FrameScheduler',
    'FiberDriver',
    'DriverState',
    'SceneConfig',
    'RefractionConfig',
    'Scene',
    'build_scene',
    'QtSurface',
    'FiberController',
]

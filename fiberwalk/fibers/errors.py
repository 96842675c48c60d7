"""
Error taxonomy for the fiber engine.

Configuration errors fail fast at scene assembly, before anything is
scheduled. Surface errors come from draw calls and halt the fiber whose
tick raised them.
"""


class FiberwalkError(Exception):
    """Base class for fiber engine errors."""


class ConfigurationError(FiberwalkError, ValueError):
    """Invalid scene, fiber or field configuration."""


class SurfaceError(FiberwalkError, RuntimeError):
    """A draw call on the surface failed."""

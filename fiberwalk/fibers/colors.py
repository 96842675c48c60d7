"""
Colors - paint values carried by fibers

A fiber paints with either a solid Rgba or a two-stop GradientPaint. Gradient
paints carry only their stops; the renderer keys them to the endpoints of each
draw call, so nothing positional is ever cached between steps.
"""

import re
from typing import NamedTuple, Sequence, Union

from PyQt5.QtGui import QColor

from .errors import ConfigurationError


_HEX_RE = re.compile(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')
_FUNC_RE = re.compile(r'^rgba?\(\s*([^)]*)\)$')


class Rgba(NamedTuple):
    """8-bit RGB channels plus alpha in [0, 1]."""
    r: int
    g: int
    b: int
    a: float = 1.0

    def with_alpha(self, alpha: float) -> "Rgba":
        return self._replace(a=min(1.0, max(0.0, alpha)))

    def to_qcolor(self) -> QColor:
        color = QColor(self.r, self.g, self.b)
        color.setAlphaF(self.a)
        return color

    def css(self) -> str:
        return f"rgba({self.r},{self.g},{self.b},{self.a:g})"


class GradientPaint(NamedTuple):
    """Two-stop linear gradient, laid out from a segment's start to its end."""
    start: Rgba
    stop: Rgba

    def with_alpha(self, alpha: float) -> "GradientPaint":
        return GradientPaint(self.start.with_alpha(alpha), self.stop.with_alpha(alpha))


Paint = Union[Rgba, GradientPaint]


def clamp_channel(value: float) -> int:
    return int(min(255, max(0, round(value))))


def _check_channels(r, g, b, a, spec) -> Rgba:
    for channel in (r, g, b):
        if not 0 <= channel <= 255:
            raise ConfigurationError(f"Color channel out of range in {spec!r}")
    if not 0.0 <= a <= 1.0:
        raise ConfigurationError(f"Alpha out of range in {spec!r}")
    return Rgba(int(r), int(g), int(b), float(a))


def parse_color(spec) -> Rgba:
    """
    Parse a color spec into Rgba.

    Accepts '#rgb', '#rrggbb', '#rrggbbaa', 'rgb(r,g,b)', 'rgba(r,g,b,a)',
    an (r, g, b[, a]) sequence, or an Rgba. Raises ConfigurationError otherwise.
    """
    if isinstance(spec, Rgba):
        return _check_channels(spec.r, spec.g, spec.b, spec.a, spec)

    if isinstance(spec, str):
        text = spec.strip()
        m = _HEX_RE.match(text)
        if m:
            digits = m.group(1)
            if len(digits) == 3:
                digits = ''.join(c * 2 for c in digits)
            r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
            a = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
            return Rgba(r, g, b, a)

        m = _FUNC_RE.match(text)
        if m:
            parts = [p.strip() for p in m.group(1).split(',')]
            try:
                values = [float(p) for p in parts]
            except ValueError:
                raise ConfigurationError(f"Invalid color: {spec!r}") from None
            return _from_sequence(values, spec)

        raise ConfigurationError(f"Invalid color: {spec!r}")

    if isinstance(spec, Sequence):
        return _from_sequence(list(spec), spec)

    raise ConfigurationError(f"Invalid color: {spec!r}")


def _from_sequence(values: list, spec) -> Rgba:
    if len(values) not in (3, 4):
        raise ConfigurationError(f"Color needs 3 or 4 components: {spec!r}")
    a = values[3] if len(values) == 4 else 1.0
    return _check_channels(values[0], values[1], values[2], a, spec)


def parse_paint(spec) -> Paint:
    """Parse a solid color spec, or a {'start': ..., 'stop': ...} gradient spec."""
    if isinstance(spec, GradientPaint):
        return spec
    if isinstance(spec, dict):
        try:
            return GradientPaint(parse_color(spec['start']), parse_color(spec['stop']))
        except KeyError as e:
            raise ConfigurationError(f"Gradient spec missing {e}") from None
    return parse_color(spec)


def paint_to_dict(paint: Paint):
    if isinstance(paint, GradientPaint):
        return {'start': paint.start.css(), 'stop': paint.stop.css()}
    return paint.css()

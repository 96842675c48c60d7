"""
Tests for the refraction field.

A horizontal boundary from (0, 100) to (200, 100) has normal angle pi/2, so
a fiber at heading theta on the line gets bent by 0.4 * sin(pi/2 - theta).
"""

import math
import pytest

from fiberwalk.fibers.colors import Rgba
from fiberwalk.fibers.errors import ConfigurationError
from fiberwalk.fibers.fiber_state import FiberState
from fiberwalk.fibers.refraction import RefractionField, shifted_color
from fiberwalk.fibers.rng import XorShift32


@pytest.fixture
def field():
    return RefractionField((0, 100), (200, 100))


class TestConstruction:

    def test_horizontal_norm(self, field):
        """A horizontal boundary has normal pi/2 and zero slope."""
        assert field.norm == pytest.approx(math.pi / 2)
        assert field.slope == pytest.approx(0.0)
        assert field.intercept == pytest.approx(100.0)

    def test_vertical_boundary(self):
        """A vertical boundary has normal pi and infinite slope."""
        f = RefractionField((50, 0), (50, 200))
        assert f.norm == pytest.approx(math.pi)
        assert math.isinf(f.slope)

    def test_coincident_points_raise(self):
        """Both points equal means no line."""
        with pytest.raises(ConfigurationError):
            RefractionField((10, 10), (10, 10))

    def test_threshold_must_be_positive(self):
        """A zero threshold is rejected."""
        with pytest.raises(ConfigurationError):
            RefractionField((0, 0), (10, 10), threshold=0)

    def test_from_normalized(self):
        """Normalized points scale to the surface."""
        f = RefractionField.from_normalized((0.0, 0.5), (1.0, 0.5), 400, 200)
        assert f.points == ((0.0, 100.0), (400.0, 100.0))

    def test_random_points_inside_surface(self):
        """Random boundaries stay on the surface."""
        f = RefractionField.random(300, 200, XorShift32(3))
        for x, y in f.points:
            assert 0 <= x <= 300
            assert 0 <= y <= 200

    def test_attach_returns_bound_copy(self, field, surface):
        """attach() binds a copy and leaves the original unbound."""
        bound = field.attach(surface)
        assert bound.surface is surface
        assert field.surface is None


class TestActivation:

    def test_on_the_line(self, field):
        """A point on the boundary activates the field."""
        assert field.is_active(50, 100)

    def test_far_from_line(self, field):
        """A point past the threshold does not."""
        assert not field.is_active(50, 110)

    def test_beyond_segment_extent(self, field):
        """On the infinite line, but past the segment end."""
        assert not field.is_active(300, 100)

    @pytest.mark.parametrize("x, y", [(50, 100), (50, 102), (50, 110), (-5, 100), (300, 100)])
    def test_evaluate_matches_is_active(self, field, x, y):
        """evaluate() returns a bend exactly where is_active() is true."""
        hit = field.evaluate(FiberState(x=x, y=y, theta=0.3))
        assert (hit is not None) == field.is_active(x, y)

    def test_inactive_state_unchanged(self, field):
        """Outside the region the state comes back untouched."""
        s = FiberState(x=50, y=110, theta=0.3)
        assert field.transform(s, 0) is s
        s = FiberState(x=300, y=100, theta=0.3)
        assert field.transform(s, 0) is s


class TestBending:

    def test_delta_follows_sine(self, field):
        """The bend is strength times sin(ad)."""
        s = FiberState(x=50, y=100, theta=0.3)
        out = field.transform(s, 0)
        ad = math.pi / 2 - 0.3
        assert out.theta - 0.3 == pytest.approx(0.4 * math.sin(ad))

    def test_magnitude_bounded_by_strength(self, field):
        """No heading bends by more than the strength."""
        for i in range(64):
            theta = i * math.pi / 16 - 2 * math.pi
            hit = field.evaluate(FiberState(x=50, y=100, theta=theta))
            assert abs(hit.delta) <= field.refraction + 1e-12

    def test_tint_encodes_direction(self, field):
        """Positive bends tint green, negative ones red."""
        out = field.transform(FiberState(x=50, y=100, theta=0.0), 0)
        # delta = +0.4 -> green up, red down
        assert out.color == shifted_color(0.4, 120.0, 0.2)
        assert out.color.g > out.color.r

    def test_shifted_color_clamps(self):
        """Large deltas clamp the channels."""
        c = shifted_color(5.0, 200.0, 0.5)
        assert c == Rgba(0, 255, 128, 0.5)

    def test_no_surface_no_drawing(self, field, surface):
        """An unbound field bends without drawing."""
        field.transform(FiberState(x=50, y=100, theta=0.0), 0)
        assert surface.calls == []


class TestTraces:

    def test_trace_dot_on_activation(self, surface):
        """A bound field leaves a faint dot where it bends."""
        field = RefractionField((0, 100), (200, 100), surface=surface)
        field.transform(FiberState(x=50, y=100, theta=0.0), 0)
        circles = surface.named('fill_circle')
        assert len(circles) == 1
        assert circles[0][1:3] == (50, 100)
        assert circles[0][4].a == pytest.approx(0.08)

    def test_debug_marker_uses_quadrant_color(self, surface):
        """Debug mode adds a marker in the quadrant's color."""
        field = RefractionField((0, 100), (200, 100), debug=True, surface=surface)
        hit = field.evaluate(FiberState(x=50, y=100, theta=0.3))
        assert hit.quadrant == 'D'
        field.transform(FiberState(x=50, y=100, theta=0.3), 0)
        circles = surface.named('fill_circle')
        assert len(circles) == 2
        assert circles[0][4] == Rgba(255, 255, 0, 1.0)

    def test_draw_boundary(self, field, surface):
        """draw_boundary strokes the segment itself."""
        field.draw_boundary(surface, '#ff000080', 2.0)
        (line,) = surface.named('stroke_line')
        assert line[1:5] == (0.0, 100.0, 200.0, 100.0)
        assert line[6] == 2.0

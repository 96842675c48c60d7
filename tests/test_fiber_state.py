"""Tests for FiberState and the random sources."""

import dataclasses
import random

import pytest

from fiberwalk.fibers.colors import GradientPaint, Rgba
from fiberwalk.fibers.errors import ConfigurationError
from fiberwalk.fibers.fiber_state import FiberState
from fiberwalk.fibers.placement import ring_placement
from fiberwalk.fibers.rng import XorShift32, make_rng


class TestFiberState:

    def test_frozen(self):
        """FiberState cannot be mutated in place."""
        s = FiberState()
        with pytest.raises(dataclasses.FrozenInstanceError):
            s.x = 5

    def test_evolve_returns_new(self):
        """evolve() returns a copy and leaves the original alone."""
        s = FiberState(x=1.0)
        t = s.evolve(x=2.0)
        assert (s.x, t.x) == (1.0, 2.0)

    @pytest.mark.parametrize("steps, loop", [(0, 0), (-3, 0), (5, -1)])
    def test_invalid_budget(self, steps, loop):
        """steps must be positive and loop non-negative."""
        with pytest.raises(ConfigurationError):
            FiberState(steps=steps, loop=loop)

    def test_dict_round_trip(self):
        """to_dict and from_dict agree."""
        s = FiberState(x=1.5, y=-2.0, theta=0.25, d=8.0, color=Rgba(10, 20, 30, 0.5),
                       steps=7, loop=2)
        assert FiberState.from_dict(s.to_dict()) == s

    def test_gradient_color_round_trip(self):
        """Gradient colors survive serialization."""
        s = FiberState(color=GradientPaint(Rgba(0, 0, 0), Rgba(255, 0, 0)))
        assert FiberState.from_dict(s.to_dict()).color == s.color


class TestXorShift32:

    def test_deterministic(self):
        """Equal seeds give equal streams."""
        a, b = XorShift32(1), XorShift32(1)
        assert [a.random() for _ in range(10)] == [b.random() for _ in range(10)]

    def test_zero_seed_still_moves(self):
        """Seed 0 does not lock the generator at zero."""
        r = XorShift32(0)
        assert r.random() != r.random()

    def test_ranges(self):
        """random, randint and uniform stay in their ranges."""
        r = XorShift32(77)
        for _ in range(2000):
            assert 0.0 <= r.random() < 1.0
            assert 3 <= r.randint(3, 5) <= 5
            assert -1.0 <= r.uniform(-1.0, 1.0) < 1.0

    def test_randint_reaches_both_ends(self):
        """randint is inclusive at both bounds."""
        r = XorShift32(5)
        seen = {r.randint(2, 4) for _ in range(500)}
        assert seen == {2, 3, 4}

    def test_randint_single_value(self):
        """A degenerate range always returns its only value."""
        r = XorShift32(5)
        assert all(r.randint(7, 7) == 7 for _ in range(50))

    def test_make_rng(self):
        """make_rng seeds an XorShift32, or picks a seed itself."""
        assert make_rng(9).random() == XorShift32(9).random()
        assert isinstance(make_rng(None), XorShift32)

    def test_stdlib_random_is_a_source(self):
        """Strategies only need random() and uniform()."""
        place = ring_placement((0.0, 0.0), 1.0, 2.0, random.Random(3))
        s = place(FiberState(), 0)
        assert 1.0 - 1e-9 <= (s.x ** 2 + s.y ** 2) ** 0.5 <= 2.0 + 1e-9

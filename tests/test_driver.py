"""
Tests for the fiber driver state machine.

Covers:
- tick counts for single and multi-loop fibers
- per-loop step counter resets at re-seed
- loop color alternation and placement re-seed index
- failure isolation between fibers
- end-to-end straight-line walk
"""

from unittest.mock import MagicMock

import pytest

from fiberwalk.fibers.colors import Rgba
from fiberwalk.fibers.driver import DriverState, FiberDriver
from fiberwalk.fibers.errors import SurfaceError
from fiberwalk.fibers.fiber_state import FiberState
from fiberwalk.fibers.placement import fixed_placement
from fiberwalk.fibers.renderers import segment_renderer
from fiberwalk.fibers.scene import SceneConfig, build_scene
from fiberwalk.fibers.scheduler import FrameScheduler
from fiberwalk.fibers.transforms import identity
from tests.helpers.recording_surface import RecordingSurface


def _driver(state, surface, scheduler, **kwargs):
    kwargs.setdefault('renderer', segment_renderer())
    kwargs.setdefault('transform', identity)
    kwargs.setdefault('placement', fixed_placement(0, 0))
    return FiberDriver(0, state, surface=surface, scheduler=scheduler, **kwargs)


class TestTickCounts:

    def test_single_loop(self, surface, scheduler):
        """A loop-free fiber ticks once per step, then terminates."""
        d = _driver(FiberState(steps=5, loop=0), surface, scheduler)
        d.start()
        scheduler.run_until_idle()
        assert d.tick_count == 5
        assert len(surface.named('stroke_line')) == 5
        assert d.status is DriverState.TERMINATED

    def test_multiple_loops(self, surface, scheduler):
        """loop re-seeds run the step budget again each time."""
        d = _driver(FiberState(steps=3, loop=2), surface, scheduler)
        d.start()
        scheduler.run_until_idle()
        assert d.tick_count == (2 + 1) * 3
        assert d.reseeds == 2
        assert d.state.loop == 0

    def test_one_tick_per_frame(self, surface, scheduler):
        """A fiber advances at most once per frame."""
        d = _driver(FiberState(steps=4), surface, scheduler)
        d.start()
        frames = scheduler.run_until_idle()
        assert frames == 4

    def test_start_twice_is_noop(self, surface, scheduler):
        """A second start() does not queue a second tick."""
        d = _driver(FiberState(steps=2), surface, scheduler)
        d.start()
        d.start()
        assert scheduler.pending == 1


class TestStepCounter:

    def test_resets_at_loop_boundary(self, surface, scheduler):
        """The step counter restarts at zero after each re-seed."""
        seen = []

        def record(state, step):
            seen.append(step)
            return state

        d = _driver(FiberState(steps=3, loop=2), surface, scheduler, transform=record)
        d.start()
        scheduler.run_until_idle()
        assert seen == [0, 1, 2, 0, 1, 2, 0, 1, 2]

    def test_transform_cannot_change_budget(self, surface, scheduler):
        """Transforms cannot stretch steps or loop."""
        def greedy(state, step):
            return state.evolve(steps=100, loop=50)

        d = _driver(FiberState(steps=2, loop=1), surface, scheduler, transform=greedy)
        d.start()
        scheduler.run_until_idle()
        assert d.tick_count == 4
        assert d.state.steps == 2


class TestReseed:

    def test_placement_gets_reseed_index(self, surface, scheduler):
        """Re-seeds call placement with 1, 2, ... in order."""
        indices = []

        def place(state, loop_index):
            indices.append(loop_index)
            return state.evolve(x=100.0 * loop_index, y=0.0)

        d = _driver(FiberState(steps=1, loop=2), surface, scheduler, placement=place)
        d.start()
        scheduler.run_until_idle()
        assert indices == [1, 2]
        starts = [c[1] for c in surface.named('stroke_line')]
        assert starts == [0.0, 100.0, 200.0]

    def test_loop_colors_alternate(self, surface, scheduler):
        """Re-seeded loops alternate between the two loop colors."""
        dark, light = Rgba(0, 0, 0), Rgba(200, 200, 200)
        d = _driver(FiberState(steps=1, loop=3, color=Rgba(1, 2, 3)), surface, scheduler,
                    loop_colors=(dark, light))
        d.start()
        scheduler.run_until_idle()
        paints = [c[5] for c in surface.named('stroke_line')]
        assert paints == [Rgba(1, 2, 3), light, dark, light]

    def test_on_finished_fires_once(self, surface, scheduler):
        """The finished callback runs once, with the driver."""
        finished = MagicMock()
        d = _driver(FiberState(steps=2, loop=1), surface, scheduler, on_finished=finished)
        d.start()
        scheduler.run_until_idle()
        finished.assert_called_once_with(d)


class TestFailureIsolation:

    def test_failing_fiber_does_not_stop_others(self, scheduler):
        """A draw failure kills only its own fiber."""
        bad_surface = RecordingSurface(fail_after=1)
        good_surface = RecordingSurface()
        bad = FiberDriver(0, FiberState(steps=3), segment_renderer(), identity,
                          fixed_placement(0, 0), bad_surface, scheduler)
        good = FiberDriver(1, FiberState(steps=3), segment_renderer(), identity,
                           fixed_placement(0, 0), good_surface, scheduler)
        bad.start()
        good.start()

        with pytest.raises(SurfaceError):
            scheduler.run_until_idle()

        assert bad.status is DriverState.FAILED
        assert not bad.alive
        assert good.status is DriverState.TERMINATED
        assert good.tick_count == 3
        assert len(scheduler.errors) == 1


class TestInterleaving:

    def test_fibers_advance_together(self, surface, scheduler):
        """Two fibers take turns, one tick each per frame."""
        order = []

        def tagged(tag):
            def render(surf, state):
                order.append(tag)
                return state
            return render

        a = _driver(FiberState(steps=2), surface, scheduler, renderer=tagged('a'))
        b = _driver(FiberState(steps=2), surface, scheduler, renderer=tagged('b'))
        a.start()
        b.start()
        scheduler.run_until_idle()
        assert order == ['a', 'b', 'a', 'b']


class TestStraightWalk:
    """One fiber, identity transform, fixed placement: four collinear segments."""

    def test_four_segments(self):
        """Four ticks of length 10 along the x axis."""
        surface = RecordingSurface(200, 200)
        config = SceneConfig(
            fiber_count=1,
            steps_range=(4, 4),
            loop_range=(0, 0),
            distance_range=(10.0, 10.0),
            placement=fixed_placement(0.0, 0.0, 0.0),
            transform=identity,
            renderer='segment',
            noise_opacity=None,
            frame_mode='immediate',
        )
        scene = build_scene(config, surface=surface)
        scheduler = FrameScheduler(mode='immediate')
        d = FiberDriver(0, scene.fibers[0], scene.renderer, scene.transform,
                        scene.placement, surface, scheduler)
        d.start()
        scheduler.run_until_idle()

        segments = [c[1:5] for c in surface.named('stroke_line')]
        assert segments == [
            (0.0, 0.0, 10.0, 0.0),
            (10.0, 0.0, 20.0, 0.0),
            (20.0, 0.0, 30.0, 0.0),
            (30.0, 0.0, 40.0, 0.0),
        ]
        assert d.state.position == (40.0, 0.0)
        assert d.status is DriverState.TERMINATED

"""
Central Configuration
All constants, defaults and scene presets in one place
"""

import math

# === SCHEDULING ===
FRAME_HZ = 60
FRAME_MODES = ('frame', 'immediate')
DEFAULT_FRAME_MODE = 'frame'

# === SURFACE ===
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 800
DEFAULT_BACKGROUND = '#fff9de'

# === PALETTE ===
PALETTE = [
    '#222222',
    '#fae1f6',
    '#b966d3',
    '#8ED2EE',
    '#362599',
    '#fff9de',
    '#FFC874',
]

# Alternating tones applied at loop boundaries
LOOP_COLORS = ('#808080', '#222222')

# === FIBERS ===
DEFAULT_FIBER_COUNT = 40
DEFAULT_STEPS_RANGE = (40, 120)
DEFAULT_LOOP_RANGE = (0, 3)
DEFAULT_DISTANCE_RANGE = (4.0, 12.0)
DEFAULT_LINE_WIDTH = 1.0
DEFAULT_POINT_RADIUS = 1.0

# Wander bounds
WANDER_ANGLE = math.pi / 10
WANDER_SCALE = (0.9, 1.1)

# Spiral bounds (multiplied by pi/steps)
SPIRAL_RATE = (0.1, 1.0)

# Fade peak alpha
FADE_K = 0.8

# === PLACEMENT ===
# Ring radius band as a fraction of min(width, height)
RING_BAND = (0.15, 0.35)
# Moving ring: center drift per loop (fraction of min(width, height))
RING_DRIFT = (0.03, 0.0)
# Expanding ring: radius growth per loop (fraction of min(width, height))
RING_GROWTH = 0.04
RING_JITTER = 2.0

# === REFRACTION ===
REFRACTION_STRENGTH = 0.4
REFRACTION_DOT_CHROMA = 200.0
REFRACTION_LINE_CHROMA = 120.0
# Activation distance from the boundary line, in surface units (pixels)
REFRACTION_THRESHOLD = 1.1
REFRACTION_TRACE_ALPHA = 0.08
REFRACTION_TINT_ALPHA = 0.2
REFRACTION_DOT_RADIUS = 1.5

# Debug marker colors per angle quadrant
QUADRANT_COLORS = {
    'A': '#ff0000',
    'B': '#00ff00',
    'C': '#0000ff',
    'D': '#ffff00',
}

# === NOISE ===
DEFAULT_NOISE_OPACITY = 0.04
NOISE_TILE_DIVISOR = 3  # tile edge = width / divisor
MIN_NOISE_TILE = 16

# === SCENE PRESETS ===
# Partial SceneConfig dicts; unspecified keys keep their defaults
SCENE_PRESETS = {
    'rings': {
        'placement': 'ring',
        'transform': ['wander'],
        'renderer': 'segment',
    },
    'drift': {
        'placement': 'moving_ring',
        'transform': ['wander', 'fade'],
        'renderer': 'segment',
        'loop_range': [2, 5],
    },
    'bloom': {
        'placement': 'expanding_ring',
        'transform': ['spiral'],
        'renderer': 'segment',
        'loop_range': [1, 4],
    },
    'stipple': {
        'placement': 'random',
        'transform': ['wander', 'bounce'],
        'renderer': 'point',
        'steps_range': [80, 200],
    },
    'refraction': {
        'placement': 'random',
        'transform': ['wander', 'refract', 'bounce'],
        'renderer': 'segment',
        'fiber_count': 120,
        'steps_range': [150, 300],
        'refraction': {'enabled': True},
    },
}

DEFAULT_PRESET = 'rings'

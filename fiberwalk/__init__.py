"""
Fiberwalk - procedural line art from frame-paced fiber walks

Usage:
    python -m fiberwalk render --preset refraction --seed 42 --out walk.png
    python -m fiberwalk show --preset drift
    python -m fiberwalk presets
"""

__version__ = "0.1.0"

"""
fiberwalk/main.py
Command-line interface for Fiberwalk

Usage:
    python -m fiberwalk render --preset refraction --seed 42 --out walk.png
    python -m fiberwalk show --preset drift
    python -m fiberwalk presets
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import DEFAULT_PRESET, SCENE_PRESETS


def build_config(args: argparse.Namespace, frame_mode: str):
    """SceneConfig from --config / --preset plus command-line overrides."""
    from .fibers.scene import SceneConfig

    if args.config:
        data = json.loads(Path(args.config).read_text(encoding="utf-8"))
    else:
        data = dict(SCENE_PRESETS[args.preset])

    overrides = {
        "seed": args.seed,
        "width": args.width,
        "height": args.height,
        "fiber_count": args.fibers,
        "noise_opacity": args.noise,
    }
    for key, value in overrides.items():
        if value is not None:
            data[key] = value
    if args.no_noise:
        data["noise_opacity"] = None
    data["frame_mode"] = frame_mode
    return SceneConfig.from_dict(data)


def _setup_logging(args: argparse.Namespace) -> None:
    from .utils.logger import logger

    logger.configure(verbose=args.verbose, log_file=args.log_file)


def cmd_render(args: argparse.Namespace) -> int:
    """Render a scene to an image file without opening a window."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt5.QtGui import QGuiApplication

    from .fibers.controller import FiberController
    from .fibers.errors import FiberwalkError
    from .utils.app_paths import default_output_path
    from .utils.logger import logger

    _setup_logging(args)
    app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])  # noqa: F841

    try:
        config = build_config(args, frame_mode="immediate")
        controller = FiberController(config)
        surface = controller.run_until_done()
        out = Path(args.out) if args.out else default_output_path(args.preset, controller.seed)
        surface.save(out)
    except (FiberwalkError, OSError, json.JSONDecodeError) as e:
        logger.error("Render failed", component="CLI", details=str(e))
        return 1

    print(out)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Animate a scene in a window."""
    from PyQt5.QtWidgets import QApplication

    from .fibers.controller import FiberController
    from .fibers.errors import FiberwalkError
    from .gui.fiber_canvas import FiberWindow
    from .utils.logger import logger

    _setup_logging(args)
    app = QApplication.instance() or QApplication(sys.argv[:1])

    try:
        config = build_config(args, frame_mode="frame")
        controller = FiberController(config)
        window = FiberWindow(controller, preset=args.preset)
        window.show()
        controller.start()
    except (FiberwalkError, OSError, json.JSONDecodeError) as e:
        logger.error("Could not start scene", component="CLI", details=str(e))
        return 1

    return app.exec_()


def cmd_presets(args: argparse.Namespace) -> int:
    """List scene presets."""
    for name, preset in SCENE_PRESETS.items():
        transform = preset.get("transform", [])
        if not isinstance(transform, str):
            transform = "+".join(transform)
        marker = "*" if name == DEFAULT_PRESET else " "
        print(f"{marker} {name:<12} {preset.get('placement', '-'):<15} "
              f"{transform:<24} {preset.get('renderer', '-')}")
    return 0


def _add_scene_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--preset", default=DEFAULT_PRESET, choices=sorted(SCENE_PRESETS),
                        help="Scene preset")
    parser.add_argument("--config", help="JSON scene config (overrides --preset)")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--width", type=int, help="Surface width in pixels")
    parser.add_argument("--height", type=int, help="Surface height in pixels")
    parser.add_argument("--fibers", type=int, help="Number of fibers")
    parser.add_argument("--noise", type=float, help="Noise overlay opacity (0-1)")
    parser.add_argument("--no-noise", action="store_true", help="Skip the noise overlay")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also log to this file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fiberwalk",
        description="Procedural line art from frame-paced fiber walks",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    render = sub.add_parser("render", help="Render a scene to a PNG")
    _add_scene_args(render)
    render.add_argument("-o", "--out", help="Output image path")
    render.set_defaults(func=cmd_render)

    show = sub.add_parser("show", help="Animate a scene in a window")
    _add_scene_args(show)
    show.set_defaults(func=cmd_show)

    presets = sub.add_parser("presets", help="List scene presets")
    presets.set_defaults(func=cmd_presets)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    from .utils.logger import logger

    try:
        return args.func(args)
    finally:
        logger.close_file()


if __name__ == "__main__":
    sys.exit(main())

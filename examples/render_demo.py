#!/usr/bin/env python3
"""Render one of the built-in demo scenes.

Usage:
    python examples/render_demo.py [options]

Options:
    --scene {direct,path}  Demo scene to render (default: direct)
    --width WIDTH          Image width in pixels (default: 1920)
    --height HEIGHT        Image height in pixels (default: 1080)
    --samples SAMPLES      Samples per pixel (default: 1 direct, 64 path)
    --depth DEPTH          Recursion limit (default: 25)
    --seed SEED            Random seed (default: 0)
    --sky                  Use the sky gradient for escaping rays
    --jitter               Jitter primary rays inside each pixel
    --texture PATH         Image to use instead of the checkerboard
    --output OUTPUT        Output file path (default: demo.png)
    --batch-size SIZE      Samples per progress update (default: 8)
    --log-level LEVEL      Logging level (default: INFO)

Example:
    python examples/render_demo.py --scene path --width 640 --height 360 --sky
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("glimmer.examples.render_demo")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a built-in demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=("direct", "path"), default="direct")
    parser.add_argument("--width", type=int, default=1920, help="Image width (default: 1920)")
    parser.add_argument("--height", type=int, default=1080, help="Image height (default: 1080)")
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Samples per pixel (default: 1 for direct, 64 for path)",
    )
    parser.add_argument("--depth", type=int, default=25, help="Recursion limit (default: 25)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--sky", action="store_true", help="Sky gradient background")
    parser.add_argument("--jitter", action="store_true", help="Jitter primary rays")
    parser.add_argument("--texture", type=Path, default=None, help="Texture image path")
    parser.add_argument("--output", type=str, default="demo.png", help="Output PNG path")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=8,
        help="Samples per progress update (default: 8)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser.parse_args()


def render_demo(args: argparse.Namespace) -> Path:
    """Build, render and save the requested demo scene.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from glimmer.core.config import BackgroundPolicy, RenderSettings
    from glimmer.core.progressive import ProgressiveRenderer
    from glimmer.preview.export import load_texels, save_png
    from glimmer.scene.demo import create_demo_scene, create_path_traced_scene

    texels = load_texels(args.texture) if args.texture is not None else None
    if args.scene == "direct":
        scene = create_demo_scene(args.width, args.height, texels)
        default_samples = 1
    else:
        scene = create_path_traced_scene(args.width, args.height, texels)
        default_samples = 64

    settings = RenderSettings(
        recursion_limit=args.depth,
        samples_per_pixel=args.samples if args.samples is not None else default_samples,
        seed=args.seed,
        background=BackgroundPolicy.SKY if args.sky else BackgroundPolicy.BLACK,
        jitter=args.jitter,
    )

    renderer = ProgressiveRenderer(scene, settings)
    logger.info("Rendering %r", renderer)

    start_time = time.perf_counter()
    for current, target in renderer.render_progressive(batch_size=args.batch_size):
        elapsed = time.perf_counter() - start_time
        logger.info(
            "Progress: %d/%d samples (%.1f spp/s)",
            current,
            target,
            current / elapsed if elapsed > 0 else 0.0,
        )

    output_file = Path(args.output)
    save_png(renderer.get_image_rgba8(), output_file)
    logger.info("Total time: %.2fs", time.perf_counter() - start_time)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    from glimmer.logging_config import setup_logging

    setup_logging(args.log_level)

    # Falls back to CPU when no GPU backend is available
    ti.init(arch=ti.gpu)

    try:
        render_demo(args)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

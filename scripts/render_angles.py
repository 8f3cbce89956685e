#!/usr/bin/env python
"""
Render every camera angle of one image through the render proxy.

Usage:
    python scripts/render_angles.py photo.png --out renders/
    python scripts/render_angles.py photo.png --elevation 30 --distance 0.6 --seed 42
"""

import argparse
import asyncio
import base64
import json
import logging
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from core.camera import AngleRenderOrchestrator, RenderApiClient, RenderSettings
from core.camera.orchestrator import DEFAULT_PROMPT
from core.services import ServiceConfig

logger = logging.getLogger("render_angles")


def save_result(index: int, azimuth: float, image: str, out_dir: Path) -> str:
    """Write a data URL image to disk; remote URLs are returned unchanged."""
    if not image.startswith("data:"):
        return image

    header, _, encoded = image.partition(",")
    ext = "jpg" if "jpeg" in header else "png"
    path = out_dir / f"{index:02d}_az{int(azimuth):03d}.{ext}"
    path.write_bytes(base64.b64decode(encoded))
    return str(path)


async def render(args: argparse.Namespace) -> int:
    image_path = Path(args.image)
    payload = base64.b64encode(image_path.read_bytes()).decode("ascii")

    settings = RenderSettings(
        elevation=args.elevation,
        distance=args.distance,
        guidance_scale=args.guidance,
        steps=args.steps,
        width=args.width,
        height=args.height,
        seed=args.seed if args.seed is not None else 1234,
        randomize_seed=args.seed is None,
    )

    async with RenderApiClient(args.api_url) as client:
        orchestrator = AngleRenderOrchestrator(
            client,
            settings=settings,
            extra_prompt=args.prompt,
            max_parallel=args.parallel,
        )
        await orchestrator.upload(payload)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    manifest = []
    for index, result in enumerate(orchestrator.results):
        entry = result.to_dict()
        if result.image:
            entry["image"] = save_result(index, result.azimuth, result.image, out_dir)
        manifest.append(entry)
        logger.info(f"{orchestrator.angle_labels[index]}: {result.status}")

    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2))
    logger.info(
        f"{orchestrator.status_message} "
        f"{orchestrator.completed_count}/{orchestrator.total_frames} angles rendered"
    )
    return 0 if orchestrator.failed_count == 0 else 1


def main() -> int:
    config = ServiceConfig.from_env()

    parser = argparse.ArgumentParser(
        description="Render all camera angles of an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("image", help="Source image file")
    parser.add_argument("--out", default="renders", help="Output directory (default: renders)")
    parser.add_argument("--api-url", default=config.render_api_url, help="Render proxy URL")
    parser.add_argument("--prompt", default=DEFAULT_PROMPT, help="Text appended to every angle prompt")
    parser.add_argument("--elevation", type=float, default=20, help="Camera elevation in degrees")
    parser.add_argument("--distance", type=float, default=1.0, help="Relative camera distance")
    parser.add_argument("--guidance", type=float, default=3.5, help="Guidance scale")
    parser.add_argument("--steps", type=int, default=16, help="Inference steps")
    parser.add_argument("--width", type=int, default=512)
    parser.add_argument("--height", type=int, default=512)
    parser.add_argument("--seed", type=int, default=None, help="Fixed seed (random if omitted)")
    parser.add_argument("--parallel", type=int, default=3, help="Concurrent renders")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not Path(args.image).is_file():
        logger.error(f"Image not found: {args.image}")
        return 2

    return asyncio.run(render(args))


if __name__ == "__main__":
    sys.exit(main())

"""Command-line runner: detect plates in an image file and save the results."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from platedetector.core.constants import DEFAULT_CLASSIFIER_NAME
from platedetector.core.exceptions import DetectionError, InputError
from platedetector.detection.config import DetectionConfig
from platedetector.detection.pipeline import PlateDetectionPipeline
from platedetector.utils.image import ImageUtils
from platedetector.utils.system import SystemUtils

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect license plates in images")
    parser.add_argument("images", nargs="*", help="Paths to input images")
    parser.add_argument(
        "--classifier",
        default=DEFAULT_CLASSIFIER_NAME,
        help="Cascade model path, or the name of a model bundled with OpenCV",
    )
    parser.add_argument("--config", help="JSON file with detection settings")
    parser.add_argument(
        "--resize-factor", type=float, help="Upscale applied before detection"
    )
    parser.add_argument(
        "--search-scale", type=float, help="Cascade search scale increment"
    )
    parser.add_argument("--outdir", default="results", help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")
    parser.add_argument(
        "--system-info",
        action="store_true",
        help="Print OpenCV, platform and dependency information and exit",
    )
    return parser


def load_config(args: argparse.Namespace) -> DetectionConfig:
    """Build the detection config from a JSON file and command-line overrides."""
    config = (
        DetectionConfig.from_json_file(Path(args.config))
        if args.config
        else DetectionConfig()
    )

    overrides = {}
    if args.resize_factor is not None:
        overrides["resize_factor"] = args.resize_factor
    if args.search_scale is not None:
        overrides["search_scale_factor"] = args.search_scale
    if overrides:
        config = DetectionConfig.model_validate({**config.model_dump(), **overrides})
    return config


def print_system_info() -> None:
    """Dump environment details used when reporting detection problems."""
    info = SystemUtils.get_system_info()
    info["dependencies"] = SystemUtils.check_dependencies()
    print(json.dumps(info, indent=2, default=str))


def process_image(
    pipeline: PlateDetectionPipeline, image_path: Path, outdir: Path
) -> None:
    """Detect plates in one image file and write its result files."""
    validation = ImageUtils.validate_image_file(image_path)
    validation.raise_if_invalid(InputError)
    for warning in validation.warnings:
        logger.warning(warning)

    frame = ImageUtils.load_image(image_path)
    output = pipeline.detect(frame)

    json_path = outdir / f"{image_path.stem}_plates.json"
    json_path.write_text(output.detections.model_dump_json(indent=2), encoding="utf-8")

    if output.should_display:
        preview_path = outdir / f"{image_path.stem}_plates.jpg"
        ImageUtils.save_image(output.annotated_frame, preview_path)
        msg = f"{image_path.name}: {output.detections.detection_count} plates"
    else:
        msg = f"{image_path.name}: no plates found"
    logger.info(msg)


def main(argv: list[str] | None = None) -> int:
    """Run detection over every image; return the number of failed images."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.system_info:
        print_system_info()
        return 0

    if not args.images:
        parser.error("at least one image is required")

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    try:
        config = load_config(args)
        pipeline = PlateDetectionPipeline.from_path(args.classifier, config)
    except (DetectionError, FileNotFoundError, ValueError) as e:
        msg = f"Unable to start plate detection: {e}"
        logger.exception(msg)
        return 1

    failures = 0
    with pipeline:
        for image_arg in args.images:
            image_path = Path(image_arg)
            try:
                process_image(pipeline, image_path, outdir)
            except (DetectionError, OSError, RuntimeError) as e:
                failures += 1
                msg = f"Skipping {image_path}: {e}"
                logger.error(msg)

    return failures

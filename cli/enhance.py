"""
Enhance screenshots for OCR from the command line.

    cybershield-enhance shot.png folder_of_shots/ -o data/enhanced
"""
import argparse
import logging
import os
import sys
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)
# ───────────────────────────────────────────

from services.image_service import ImageService
from services.image_enhancement_service import ImageEnhancementService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cybershield-enhance",
        description="Downscale, sharpen and contrast-boost images for OCR analysis.",
    )
    parser.add_argument("inputs", nargs="+", help="image files or folders of images")
    parser.add_argument("-o", "--output-dir", default=os.getenv("ENHANCED_DIR_PATH"),
                        help="where to write *_enhanced.jpg files (default: next to each input)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    image_service = ImageService()
    enhancement_service = ImageEnhancementService(image_service=image_service)

    paths = image_service.expand_inputs(args.inputs)
    if not paths:
        logger.error("No images found in the given inputs")
        return 1

    written = enhancement_service.enhance_files(paths, args.output_dir)
    for path in written:
        print(path)

    logger.info(f"Enhanced {len(written)}/{len(paths)} images")
    return 0 if len(written) == len(paths) else 2


if __name__ == "__main__":
    sys.exit(main())

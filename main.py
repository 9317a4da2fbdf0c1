"""
imgc
Perceptual PNG/JPEG compressor driven by a single quality scalar.
"""

import sys
import tempfile
from pathlib import Path

USAGE = """\
Usage: imgc <input> <output> <quality>
       imgc --synthetic [photo|gradient|checkerboard|stripes] <output> <quality>
  input:   .png, .jpg, or .jpeg file
  output:  .png or .jpg/.jpeg file (extension selects the pipeline)
  quality: 0.0 (lowest quality) to 1.0 (highest quality)"""


def run_synthetic(args, settings):
    """Compress a generated test image instead of a file on disk."""
    from engines.pipeline import compress_file
    from utils.image_io import encode_truecolor, write_output
    from utils.test_images import SYNTHETIC_IMAGES

    kind = 'photo'
    if len(args) == 3:
        kind, args = args[0], args[1:]
    if len(args) != 2 or kind not in SYNTHETIC_IMAGES:
        print(USAGE)
        return 1

    output, quality = args
    with tempfile.TemporaryDirectory() as tmp:
        source = Path(tmp) / f"{kind}.png"
        write_output(str(source), encode_truecolor(SYNTHETIC_IMAGES[kind](), 'png'))
        compress_file(
            str(source), output, quality,
            png_compression=settings.png_compression,
            report_metrics=settings.report_metrics,
        )
    return 0


def run_cli(argv):
    """Parse arguments, run one compression, return the exit status."""
    from engines.pipeline import compress_file
    from utils.config import SETTINGS, configure_logging
    from utils.errors import CompressionError

    logger = configure_logging()

    if argv and argv[0] in ('-h', '--help'):
        print(USAGE)
        return 0

    try:
        if argv and argv[0] == '--synthetic':
            return run_synthetic(argv[1:], SETTINGS)

        if len(argv) != 3:
            print(USAGE)
            return 1

        input_path, output_path, quality = argv
        compress_file(
            input_path, output_path, quality,
            png_compression=SETTINGS.png_compression,
            report_metrics=SETTINGS.report_metrics,
        )
    except CompressionError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def main(argv=None):
    return run_cli(sys.argv[1:] if argv is None else list(argv))


if __name__ == '__main__':
    sys.exit(main())

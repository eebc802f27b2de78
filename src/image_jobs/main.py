"""Main module for the image jobs CLI."""

import sys
import json
import argparse
from typing import Dict, List, Optional

from .core.config import PipelineConfig
from .core.exceptions import ImageJobsError
from .core.factories import PipelineFactory
from .core.logging_config import quiet_library_loggers, setup_logger
from .core.models import ObjectRef, OperationTag
from .core.parameters import classify, migrate_legacy_keys, normalize


def parse_metadata_pairs(pairs: List[str]) -> Dict[str, str]:
    """Turn ``key=value`` arguments into a metadata bag."""
    metadata: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        metadata[key.strip().lower()] = value
    return metadata


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-jobs",
        description="Image Jobs - metadata-driven resize, watermark and compress pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the upload URL API
  image-jobs serve --port 8000

  # Show how a metadata bag is routed and normalized
  image-jobs classify watermark-text="ACME" watermark-position=center

  # Process one uploaded object with a worker
  image-jobs process --operation resize --bucket originals --key 1700000000000-ab12cd34-cat.jpg

  # Show version
  image-jobs version
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the upload URL HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    classify_parser = subparsers.add_parser(
        "classify", help="Classify and normalize a metadata bag"
    )
    classify_parser.add_argument(
        "pairs", nargs="*", metavar="key=value", help="Metadata entries"
    )

    process_parser = subparsers.add_parser(
        "process", help="Run one worker against a single stored object"
    )
    process_parser.add_argument(
        "--operation",
        required=True,
        choices=[tag.value for tag in OperationTag],
        help="Worker to run",
    )
    process_parser.add_argument("--bucket", required=True, help="Source S3 bucket")
    process_parser.add_argument("--key", required=True, help="Source object key")
    process_parser.add_argument(
        "--output-bucket",
        default=None,
        help="Destination bucket (default: $PROCESSED_IMAGES_BUCKET)",
    )
    process_parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    subparsers.add_parser("version", help="Show version information")
    return parser


def run_classify(pairs: List[str]) -> int:
    metadata = migrate_legacy_keys(parse_metadata_pairs(pairs))
    print(
        json.dumps(
            {"processingType": classify(metadata).value, "metadata": normalize(metadata)},
            indent=2,
            ensure_ascii=False,
        )
    )
    return 0


def run_process(args: argparse.Namespace, config: Optional[PipelineConfig] = None) -> int:
    config = config or PipelineConfig.from_env()
    if args.output_bucket:
        config = config.model_copy(update={"processed_bucket": args.output_bucket})

    logger = setup_logger(level="DEBUG" if args.debug else None)
    quiet_library_loggers()

    try:
        dispatcher = PipelineFactory(config).create_dispatcher(OperationTag(args.operation))
        result = dispatcher.process(ObjectRef(bucket=args.bucket, key=args.key))
    except ImageJobsError as e:
        logger.error(f"Processing failed: {e}")
        return 1

    print(result.model_dump_json(indent=2))
    return 0


def run_serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("image_jobs.api:app", host=host, port=port)
    return 0


def main() -> None:
    """Entry point for the ``image-jobs`` command."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command == "serve":
        sys.exit(run_serve(args.host, args.port))

    elif args.command == "classify":
        try:
            code = run_classify(args.pairs)
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))
        sys.exit(code)

    elif args.command == "process":
        sys.exit(run_process(args))

    elif args.command == "version":
        print("Image Jobs CLI")
        print("Version 0.1.0")
        print("Metadata-driven resize, watermark and compress pipeline")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

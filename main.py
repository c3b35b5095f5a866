#!/usr/bin/env python3
"""
Document Date Annotator - Command-Line Entry Point.

Runs the annotation pipeline without the browser UI: OCR an image file,
locate its issued/expiration dates and write the annotation JSON, or
inspect and export documents held by the document store.

Usage:
    Command Line:
        python main.py annotate scan.png --dataset id_cards --document-id 3
        python main.py show invoices 2
        python main.py export passports 1 --output ./annotations/

    Browser UI:
        streamlit run annotator/ui/app.py

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, List

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from annotator.models.document import dataset_ids
from annotator.utils.logger import setup_logger_from_config, get_logger
from annotator.utils.exceptions import AnnotatorError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list; defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Document Date Annotator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Annotate an uploaded scan:
        python main.py annotate id_card.png --dataset id_cards --document-id 1

    Override a proposed date:
        python main.py annotate id_card.png --issued 2022-01-15 --active

    Export a stored document:
        python main.py export invoices 2 --output ./annotations/
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    annotate = subparsers.add_parser("annotate", help="OCR an image and write its annotation file")
    annotate.add_argument("image", type=str, help="Image file to annotate")
    annotate.add_argument("--dataset", "-d", choices=dataset_ids(), default=None,
                          help="Dataset the document belongs to (default: from config)")
    annotate.add_argument("--document-id", "-n", type=int, default=1,
                          help="Document index within the dataset (default: 1)")
    annotate.add_argument("--issued", type=str, default=None,
                          help="Override the located issued date")
    annotate.add_argument("--expiration", type=str, default=None,
                          help="Override the located expiration date")
    annotate.add_argument("--active", action="store_true",
                          help="Mark the document as active")
    annotate.add_argument("--output", "-o", type=str, default=None,
                          help="Output directory (default: paths.output_dir)")

    show = subparsers.add_parser("show", help="Print a stored document as JSON")
    show.add_argument("dataset", type=str, help="Dataset id")
    show.add_argument("document_id", type=int, help="Document index")

    export = subparsers.add_parser("export", help="Write a stored document's annotation file")
    export.add_argument("dataset", type=str, help="Dataset id")
    export.add_argument("document_id", type=int, help="Document index")
    export.add_argument("--output", "-o", type=str, default=None,
                        help="Output directory (default: paths.output_dir)")

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Load configuration and set up logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        import logging
        logger.setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        import logging
        logger.setLevel(logging.WARNING)

    logger.debug(f"Version: {config.get('project.version', '1.0.0')}")
    logger.debug(f"Command: {args.command}")

    return config


def run_annotate(
    image_path: str,
    dataset: Optional[str] = None,
    document_id: int = 1,
    issued: Optional[str] = None,
    expiration: Optional[str] = None,
    active: bool = False,
    output_dir: Optional[str] = None,
    extractor=None
) -> Path:
    """
    OCR an image, locate its dates and write the annotation file.

    Args:
        image_path: Image file to annotate.
        dataset: Dataset id; defaults to ``session.default_dataset``.
        document_id: Index recorded in the annotation.
        issued: Operator override for the issued date.
        expiration: Operator override for the expiration date.
        active: Status flag to record.
        output_dir: Where to write the file.
        extractor: Extraction collaborator; an OCREngine by default.

    Returns:
        Path of the written annotation file.

    Raises:
        AnnotatorError: If the image cannot be processed or an override
                        is not a date.
    """
    from annotator.store import InMemoryDocumentStore
    from annotator.session import SessionController, build_export, write_export

    logger = get_logger(__name__)

    if not Path(image_path).is_file():
        raise FileNotFoundError(f"Input image not found: {image_path}")

    controller = SessionController(InMemoryDocumentStore(), extractor=extractor)
    session = controller.start(dataset, document_id)

    logger.info(f"Annotating {image_path} as {session.dataset}#{session.document_id}")
    session = controller.upload(session, image_path)
    if session.error:
        raise AnnotatorError(session.error, {"image": image_path})

    overrides = {'status': active}
    if issued is not None:
        overrides['issued_date'] = issued
    if expiration is not None:
        overrides['expiration_date'] = expiration
    session = controller.edit(session, **overrides)

    record = session.record
    logger.info(
        f"Issued: {record.issued_date or 'not found'}, "
        f"expires: {record.expiration_date or 'not found'}"
    )

    return write_export(build_export(session), output_dir)


def run_show(dataset: str, document_id: int) -> Optional[dict]:
    """
    Fetch a document from the configured store.

    Returns:
        The record in wire format, or None when it does not exist.
    """
    from annotator.store import create_store

    record = create_store().fetch(dataset, document_id)
    return record.to_dict() if record else None


def run_export(dataset: str, document_id: int, output_dir: Optional[str] = None) -> Path:
    """
    Write the annotation file for a stored document.

    Raises:
        AnnotatorError: If the document cannot be loaded.
    """
    from annotator.store import create_store
    from annotator.session import SessionController, build_export, write_export

    controller = SessionController(create_store())
    session = controller.load(controller.start(dataset), document_id)
    if session.error:
        raise AnnotatorError(session.error, {"dataset": dataset, "document_id": document_id})

    return write_export(build_export(session), output_dir)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        if args.command == "annotate":
            path = run_annotate(
                image_path=args.image,
                dataset=args.dataset,
                document_id=args.document_id,
                issued=args.issued,
                expiration=args.expiration,
                active=args.active,
                output_dir=args.output
            )
            if not args.quiet:
                print(path)

        elif args.command == "show":
            record = run_show(args.dataset, args.document_id)
            if record is None:
                logger.error(f"Document {args.document_id} not found in dataset '{args.dataset}'")
                return 1
            print(json.dumps(record, indent=2))

        elif args.command == "export":
            path = run_export(args.dataset, args.document_id, args.output)
            if not args.quiet:
                print(path)

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except AnnotatorError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())

import sys
import argparse
import logging

from api.dme import process_note
from services.dme.errors import DmeExtractionError, UnexpectedError
from utils.config import load_settings, configure_logging

logger = logging.getLogger("dme-cli")

EXIT_SUCCESS = 0


def run(note_path=None) -> int:
    settings = load_settings(note_path_override=note_path)
    configure_logging(settings.log_level)

    logger.info("[DME-CLI-START] Starting DME extraction process")
    if note_path and note_path.strip():
        logger.info(f"[DME-CLI-OVERRIDE] File path overridden via command line: {note_path}")

    try:
        process_note(settings.note_path, settings.api_url, timeout=settings.request_timeout)
        return EXIT_SUCCESS
    except DmeExtractionError as e:
        logger.error(f"[DME-CLI-ERROR] kind={e.kind} error={e}")
        return e.exit_code
    except Exception as e:
        logger.exception("[DME-CLI-ERROR] An unexpected error occurred")
        return UnexpectedError.exit_code


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="dme-extract",
        description="Extract a DME order from a physician note and post it to the order API",
    )
    parser.add_argument("note_path", nargs="?", default=None, help="Physician note path (overrides PHYSICIAN_NOTE_PATH)")
    args = parser.parse_args(argv)
    return run(args.note_path)


if __name__ == "__main__":
    sys.exit(main())

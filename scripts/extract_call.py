"""
CLI tool to run field extraction on a saved call.

Usage:
    python scripts/extract_call.py --summary "Paulina is selling for $950,000..."
    python scripts/extract_call.py --summary-file summary.txt [--transcript-file transcript.json]

Examples:
    # Summary only, with a fixed capture date for reproducible output
    python scripts/extract_call.py --summary-file call.txt --date 2025-09-16

    # Summary plus a structured {"messages": [...]} transcript
    python scripts/extract_call.py --summary-file call.txt --transcript-file call.json
"""

import argparse
import json
import os
import sys
from datetime import date
from pathlib import Path

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv
load_dotenv(".env.local")

from src.exceptions import ExtractionError
from src.logging_config import setup_logging, get_logger
from src.services.field_extraction import FieldExtractor

setup_logging()
logger = get_logger(__name__)


def run(summary: str, transcript: str | None = None, on_date: date | None = None) -> int:
    """Extract and print the field map as JSON. Returns the process exit code."""
    extractor = FieldExtractor(clock=(lambda: on_date) if on_date else date.today)

    try:
        fields = extractor.extract(summary, transcript)
    except ExtractionError as e:
        logger.error("extraction_failed", error=str(e))
        return 1

    print(json.dumps(fields.to_dict(), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract CRM fields from a call summary/transcript")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--summary", help="Call summary text")
    source.add_argument("--summary-file", type=Path, help="File containing the call summary")
    parser.add_argument("--transcript-file", type=Path, help="Flat or JSON transcript file")
    parser.add_argument("--date", type=date.fromisoformat, help="Capture date (YYYY-MM-DD)")

    args = parser.parse_args()

    summary = args.summary if args.summary is not None else args.summary_file.read_text(encoding="utf-8")
    transcript = args.transcript_file.read_text(encoding="utf-8") if args.transcript_file else None

    sys.exit(run(summary, transcript, args.date))


if __name__ == "__main__":
    main()

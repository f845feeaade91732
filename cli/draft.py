"""
Command-line agreement drafting.

Reads tenancy details from a JSON file and prints the finished agreement:

    python -m cli.draft agreement.json --format plain --pdf out/agreement.pdf

``--offline`` skips the generation service and uses the offline renderer.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from agreements import (
    AgreementData,
    AgreementGenerationError,
    FormatMode,
    generate_rental_agreement,
    render_fallback_agreement,
)
from agreements.pdf import render_pdf_from_text


def load_agreement_data(path: str) -> AgreementData:
    """Parse and validate a JSON file of agreement fields."""
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"No such agreement file: {path}")
    return AgreementData.model_validate(json.loads(source.read_text(encoding="utf-8")))


def draft_agreement(data: AgreementData, mode: FormatMode, *, offline: bool = False) -> str:
    if offline:
        return render_fallback_agreement(data, mode)
    return generate_rental_agreement(data, mode)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Riplico rental agreement drafter")
    parser.add_argument("input", metavar="JSON", help="Path to a JSON file with the agreement details.")
    parser.add_argument(
        "--format",
        "-f",
        choices=[mode.value for mode in FormatMode],
        default=FormatMode.PLAIN.value,
        help="Output surface: plain text (default) or rich HTML.",
    )
    parser.add_argument("--pdf", metavar="PATH", help="Also write the agreement to this PDF file.")
    parser.add_argument("--offline", action="store_true", help="Render locally without calling the generation service.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        data = load_agreement_data(args.input)
    except (FileNotFoundError, json.JSONDecodeError, ValidationError) as exc:
        print(f"Could not read agreement details: {exc}", file=sys.stderr)
        return 2
    try:
        document = draft_agreement(data, FormatMode(args.format), offline=args.offline)
    except AgreementGenerationError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(document)
    if args.pdf:
        path = render_pdf_from_text(document, args.pdf)
        print(f"\nPDF saved to {path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())

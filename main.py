"""Command line entry for drafting a rental agreement from a JSON file."""

import sys

from cli.draft import main as draft_main


def main() -> int:
    """Run the CLI drafting flow."""
    return draft_main()


if __name__ == "__main__":
    sys.exit(main())

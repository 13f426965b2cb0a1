"""Main entry point for the tarot divination CLI."""

import sys

from tarot_divination.cli import main

if __name__ == "__main__":
    sys.exit(main())

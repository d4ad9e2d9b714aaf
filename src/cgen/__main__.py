"""Allow running cgen with ``python -m cgen``."""

import sys

from cgen.cli import main

if __name__ == "__main__":
	sys.exit(main())

"""``python -m vector_pessimization`` — runs the addon on a dump file."""

import sys

from vector_pessimization.checkers import main

if __name__ == "__main__":
    sys.exit(main())

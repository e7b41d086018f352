"""svn-hotbackup: svn_hotbackup/__main__.py."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())

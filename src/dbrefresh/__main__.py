"""
Allow `python -m dbrefresh`.
"""

import sys

from dbrefresh.interface.cli import main

if __name__ == "__main__":
    sys.exit(main())

# td0scan/__main__.py
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

import sys

from td0scan.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv))

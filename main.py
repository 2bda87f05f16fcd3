from __future__ import annotations

import sys

from mifcconv.cli.api import main


if __name__ == "__main__":
    sys.exit(main())

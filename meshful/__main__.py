"""Allow ``python -m meshful``."""

import sys

from meshful.cli import main

sys.exit(main())

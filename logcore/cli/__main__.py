"""Allow ``python -m logcore.cli`` as a shortcut for the analyze CLI."""

import sys

from logcore.cli.analyze import main

sys.exit(main())

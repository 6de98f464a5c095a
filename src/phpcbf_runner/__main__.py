"""Allow ``python -m phpcbf_runner``."""

import sys

from phpcbf_runner.cli import main

sys.exit(main())

"""Allow ``python -m one_line``."""
import sys

from .main import main

sys.exit(main())

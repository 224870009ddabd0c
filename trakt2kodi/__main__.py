"""Allow ``python -m trakt2kodi``."""
import sys

from .cli import main


sys.exit(main())

import sys

from fastblur.cli import main

sys.exit(main())

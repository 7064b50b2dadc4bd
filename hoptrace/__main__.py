import sys

from hoptrace.cli import main

sys.exit(main())

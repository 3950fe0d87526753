import sys

from spooltag.cli import main

sys.exit(main())

import sys

from protochain.cli import main

sys.exit(main())

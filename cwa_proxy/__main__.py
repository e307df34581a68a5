import sys

from cwa_proxy.cli import main

sys.exit(main())

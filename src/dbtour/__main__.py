import sys

from dbtour.cli import main

sys.exit(main(sys.argv[1:]))

import sys

from hyperstencil.cli import main

raise SystemExit(main(sys.argv[1:]))

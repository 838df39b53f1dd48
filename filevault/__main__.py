import sys

from filevault.cli import main

sys.exit(main())

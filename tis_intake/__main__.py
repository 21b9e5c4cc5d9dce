import sys

from tis_intake.cli import main


sys.exit(main())

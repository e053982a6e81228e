import sys

from async_mailer.cli import main

sys.exit(main())

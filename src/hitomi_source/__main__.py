import sys

from hitomi_source.cli import main


sys.exit(main())

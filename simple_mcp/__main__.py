import sys

from simple_mcp.cli import main

sys.exit(main())

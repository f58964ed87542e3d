"""Allow ``python -m userspan``."""

from userspan.cli import main


main()

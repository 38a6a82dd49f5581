"""Allow ``python -m clipvault.cli`` execution."""

from clipvault.cli.clips import main

main()

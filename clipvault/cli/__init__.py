"""ClipVault command-line tools (``python -m clipvault.cli``)."""

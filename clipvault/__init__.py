"""ClipVault: store files with AI-generated summaries, tags and categories."""

__version__ = "0.1.0"

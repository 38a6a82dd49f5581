"""Concrete adapters for the interfaces in clipvault.interfaces."""

"""Release automation for Cargo workspaces."""

__version__ = "0.3.0"

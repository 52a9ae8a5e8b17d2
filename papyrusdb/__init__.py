"""PapyrusDB - self-hosted sync endpoint for Papyrus notes, tasks and categories."""

__version__ = "0.1.0"

__all__ = ["__version__"]

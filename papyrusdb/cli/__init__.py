"""PapyrusDB command-line interface."""

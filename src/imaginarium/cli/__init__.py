"""Command-line interface: ``imaginarium tell``, ``imagine`` and ``repl``."""

"""Start, stream, pause, resume and stop external processes.

The ``process`` module holds the API; ``example`` is a demonstration command.
"""

__version__ = "0.1.0"

__all__ = ["process", "example"]
"""Natural-language query engine over support ticket snapshots."""

__version__ = "0.1.0"

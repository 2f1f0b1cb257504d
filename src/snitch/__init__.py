"""snitch: forge credential resolution and issue-tracker client."""

__version__ = "0.1.0"

"""Weekly autobiography prompts service."""

__version__ = "0.1.0"

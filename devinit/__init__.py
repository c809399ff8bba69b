"""devinit — resilient host bootstrap for devcontainer lifecycle hooks."""

__version__ = "0.1.0"

"""First-boot setup: catalogue parsing, theming and staged package installation."""

__version__ = "0.1.0"
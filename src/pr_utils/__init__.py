"""pr-utils: CLI tools for PR-related operations."""

__version__ = "1.0.0"
__author__ = "pr-utils contributors"

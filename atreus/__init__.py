"""Service logic for a short-video platform: users, comments and videos."""

__version__ = "1.0.0"
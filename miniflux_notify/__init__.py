"""Desktop notifications for new unread Miniflux entries."""

__version__ = "0.1.0"

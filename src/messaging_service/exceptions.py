class MessagingError(Exception):
    """A messaging operation failed; the message is safe to show to API callers."""


class NotFoundError(MessagingError):
    """A referenced conversation, sender or shelter does not exist."""

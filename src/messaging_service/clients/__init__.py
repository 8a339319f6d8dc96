from .messaging_client import MessagingClient, MessagingClientError

__all__ = ["MessagingClient", "MessagingClientError"]

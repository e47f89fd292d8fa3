"""Beer catalog service with a resilient remote poller."""

__version__ = "1.0.0"

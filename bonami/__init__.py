"""mDNS / DNS-SD data model, DNS wire-format codec, a message-port client and the bactl command."""

__version__ = "1.0.0"

__all__ = ["cli", "client", "dns", "errors", "service"]
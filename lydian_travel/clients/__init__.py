from .amadeus_client import AmadeusClient, AmadeusError

__all__ = ["AmadeusClient", "AmadeusError"]

"""enginetags — detect engine signatures in content-depot manifests."""

__version__ = "0.1.0"

"""artframe: addressable store for artwork sources and the current artwork."""

from artframe.provider import ArtworkStore, PayloadGate, Preferences

__all__ = ["ArtworkStore", "PayloadGate", "Preferences"]

"""Node infrastructure providers."""
from .base import Provider
from .multipass import MultipassNode, MultipassProvider


def default_provider() -> Provider:
    """Return the provider used by the command line."""
    return MultipassProvider()


__all__ = [
    'Provider',
    'MultipassNode',
    'MultipassProvider',
    'default_provider',
]

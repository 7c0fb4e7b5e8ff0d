"""Speech provider registry.

Providers are looked up by the name given in the [speech] config section,
so alternative speech backends can be plugged in without touching the
audio cache.
"""

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .base import TTSProvider

from .elevenlabs import ElevenLabsProvider

__all__ = ["ProviderRegistry"]


class ProviderRegistry:
    """Name to class mapping of available speech providers."""

    _providers: ClassVar[dict[str, type["TTSProvider"]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["TTSProvider"]) -> None:
        """Register a speech provider class under a name."""
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["TTSProvider"]:
        """Get a provider class by name.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls.names()) or "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> "TTSProvider":
        """Instantiate the provider registered under name."""
        return cls.get(name)(**kwargs)

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._providers)


ProviderRegistry.register("elevenlabs", ElevenLabsProvider)

"""
Module 04 - Provider Registry
The bounded set of providers currently backing one order.
"""
from __future__ import annotations

from typing import Callable, Iterator

from bagstore.schemas.errors import (
    AlreadyRegisteredException,
    MaxProvidersExceededException,
    UnregisteredProviderException,
)
from bagstore.schemas.order import ProviderState


WhitelistLookup = Callable[[str], bool]


class ProviderRegistry:
    """
    View over an order's provider map enforcing membership rules.

    The registry does not own the map: the order passes in the map of the
    state it is building, so a failed operation never touches committed
    state.
    """

    def __init__(
        self,
        providers: dict[str, ProviderState],
        max_providers: int,
        is_whitelisted: WhitelistLookup,
    ) -> None:
        self._providers = providers
        self.max_providers = max_providers
        self._is_whitelisted = is_whitelisted

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    @property
    def is_full(self) -> bool:
        return len(self._providers) >= self.max_providers

    def is_whitelisted(self, provider_id: str) -> bool:
        return self._is_whitelisted(provider_id)

    def get(self, provider_id: str) -> ProviderState:
        """
        Raises:
            UnregisteredProviderException: If the provider is not registered
        """
        provider = self._providers.get(provider_id)
        if provider is None:
            raise UnregisteredProviderException(
                f"Provider {provider_id} is not registered",
                provider_id=provider_id,
            )
        return provider

    def find(self, provider_id: str) -> ProviderState | None:
        return self._providers.get(provider_id)

    def ensure_can_register(self, provider_id: str) -> None:
        """
        Raises:
            AlreadyRegisteredException: If the provider is already registered
            MaxProvidersExceededException: If the provider set is full
        """
        if provider_id in self._providers:
            raise AlreadyRegisteredException(
                f"Provider {provider_id} is already registered",
                provider_id=provider_id,
            )
        if self.is_full:
            raise MaxProvidersExceededException(
                f"Order already has {len(self._providers)} of {self.max_providers} providers",
                provider_id=provider_id,
                details={"max_providers": self.max_providers},
            )

    def add(self, provider_id: str, provider: ProviderState) -> None:
        self.ensure_can_register(provider_id)
        self._providers[provider_id] = provider

    def remove(self, provider_id: str) -> ProviderState:
        provider = self.get(provider_id)
        del self._providers[provider_id]
        return provider

"""Process-local selection of the target CI provider."""

from __future__ import annotations

from .models import CIProvider


class ProviderSelection:
    """Mutable cell that always holds one ``CIProvider`` member."""

    def __init__(self, initial: CIProvider | str = CIProvider.GITHUB_ACTIONS) -> None:
        self._value = self._coerce(initial)

    @property
    def value(self) -> CIProvider:
        return self._value

    def select(self, provider: CIProvider | str) -> CIProvider:
        self._value = self._coerce(provider)
        return self._value

    @staticmethod
    def choices() -> list[CIProvider]:
        return list(CIProvider)

    @staticmethod
    def _coerce(provider: CIProvider | str) -> CIProvider:
        if isinstance(provider, CIProvider):
            return provider
        try:
            return CIProvider(provider)
        except ValueError as exc:
            choices = ", ".join(member.value for member in CIProvider)
            raise ValueError(f"Unknown CI provider '{provider}'. Expected one of: {choices}") from exc


__all__ = ["ProviderSelection"]

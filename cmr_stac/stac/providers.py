"""Provider resolution, including the virtual ALL provider.

``ALL`` is a reserved path identifier meaning "no provider filter". It is
never sent to CMR: resolve_provider_filter() removes the filter instead, and
base_url_for_collection() rewrites aggregate URLs back to the collection's
own provider.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cmr_stac.core.exceptions import ProviderNotFound

ALL_PROVIDER_ID = "ALL"
PRODUCER_ROLE = "producer"

# Provider path segment of an aggregate collections URL
_ALL_SEGMENT = re.compile(rf"/{ALL_PROVIDER_ID}(?=/collections(?:/|$))", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Provider:
    """A CMR provider as listed in the root catalog."""

    provider_id: str
    short_name: str
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_cmr(cls, data: Mapping[str, Any]) -> Provider:
        """Build from a CMR ingest ``/providers`` entry."""
        provider_id = str(data["provider-id"])
        return cls(provider_id=provider_id, short_name=str(data.get("short-name") or provider_id))


ALL_PROVIDER = Provider(provider_id=ALL_PROVIDER_ID, short_name=ALL_PROVIDER_ID.lower())


@dataclass(frozen=True, slots=True)
class ProviderSnapshot:
    """Read-only provider list captured at one refresh.

    Handlers receive a snapshot and pass it down explicitly; a refresh
    replaces the whole snapshot rather than editing it.
    """

    providers: tuple[Provider, ...] = ()

    def __len__(self) -> int:
        return len(self.providers)

    def __iter__(self):
        return iter(self.providers)

    def get(self, provider_id: str) -> Provider | None:
        for provider in self.providers:
            if provider.provider_id == provider_id:
                return provider
        return None


def is_all_provider(provider_id: str | None) -> bool:
    return provider_id is not None and provider_id.strip().upper() == ALL_PROVIDER_ID


def resolve_provider_filter(query: Mapping[str, Any], provider_id: str) -> dict[str, Any]:
    """Return ``query`` with the provider filter for ``provider_id``.

    For the ALL provider the ``provider`` key is removed entirely, which is
    what makes CMR aggregate across providers.
    """
    resolved = dict(query)
    if is_all_provider(provider_id):
        resolved.pop("provider", None)
    else:
        resolved["provider"] = provider_id
    return resolved


def find_provider(snapshot: ProviderSnapshot, provider_id: str) -> Provider:
    """Look up a provider, accepting ALL as a known provider.

    Raises:
        ProviderNotFound: If ``provider_id`` is neither ALL nor in the snapshot
    """
    if is_all_provider(provider_id):
        return ALL_PROVIDER
    provider = snapshot.get(provider_id)
    if provider is None:
        raise ProviderNotFound(provider_id)
    return provider


def with_all_provider(providers: Iterable[Provider]) -> list[Provider]:
    """Provider list for the root catalog: real providers, then ALL."""
    return [*providers, ALL_PROVIDER]


def producer_of(collection: Mapping[str, Any]) -> str | None:
    """Name of the collection provider whose roles include ``producer``."""
    for provider in collection.get("providers") or []:
        if PRODUCER_ROLE in (provider.get("roles") or []):
            return provider.get("name")
    return None


def base_url_for_collection(base_url: str, collection: Mapping[str, Any]) -> str:
    """Point an aggregate base URL at the collection's own provider.

    ``.../ALL/collections`` (ALL in any case) becomes
    ``.../{producer}/collections``. Without a producer the URL is returned
    unchanged.
    """
    producer = producer_of(collection)
    if producer:
        return _ALL_SEGMENT.sub(lambda _: f"/{producer}", base_url, count=1)
    return base_url


def collections_description(provider_id: str) -> str:
    name = "CMR" if is_all_provider(provider_id) else provider_id
    return f"All collections provided by {name}"

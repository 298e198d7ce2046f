"""Resource address resolution.

An address is resolved once, at the boundary, into one of three kinds:

    /artwork          -> ArtworkCollection
    /sources          -> SourcesCollection
    /sources/<id>     -> SourceItem(id)

Everything downstream dispatches on the resolved kind, never on the string.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from artframe.errors import UnrecognizedAddress

ARTWORK_ADDRESS = "/artwork"
SOURCES_ADDRESS = "/sources"

ARTWORK_KIND = "vnd.artframe.dir/artwork"
SOURCES_KIND = "vnd.artframe.dir/source"
SOURCE_ITEM_KIND = "vnd.artframe.item/source"

_SOURCE_ITEM_RE = re.compile(r"/sources/([0-9]+)")
_MAX_SOURCE_ID = 2**63 - 1


@dataclass(frozen=True)
class ArtworkCollection:
    address: str = ARTWORK_ADDRESS
    kind: str = ARTWORK_KIND


@dataclass(frozen=True)
class SourcesCollection:
    address: str = SOURCES_ADDRESS
    kind: str = SOURCES_KIND


@dataclass(frozen=True)
class SourceItem:
    id: int

    @property
    def address(self) -> str:
        return source_address(self.id)

    @property
    def kind(self) -> str:
        return SOURCE_ITEM_KIND


Resource = ArtworkCollection | SourcesCollection | SourceItem


def source_address(source_id: int) -> str:
    """Return the item address for the source with *source_id*."""
    return f"{SOURCES_ADDRESS}/{int(source_id)}"


def resolve(address: object) -> Resource:
    """Classify *address* into exactly one resource kind.

    Raises:
        UnrecognizedAddress: For anything other than the three known shapes.
    """
    if not isinstance(address, str):
        raise UnrecognizedAddress(address)
    if address == ARTWORK_ADDRESS:
        return ArtworkCollection()
    if address == SOURCES_ADDRESS:
        return SourcesCollection()
    m = _SOURCE_ITEM_RE.fullmatch(address)
    if m and int(m.group(1)) <= _MAX_SOURCE_ID:
        return SourceItem(int(m.group(1)))
    raise UnrecognizedAddress(address)


def kind_of(address: object) -> str:
    """Return the content-kind label for *address*."""
    return resolve(address).kind


def is_sources_address(address: str) -> bool:
    """True if *address* names the sources collection or one of its items."""
    try:
        return isinstance(resolve(address), (SourcesCollection, SourceItem))
    except UnrecognizedAddress:
        return False

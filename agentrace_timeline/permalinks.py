"""Permalinks to individual timeline blocks.

A block is addressed by the URL fragment ``#event-<block id>``. Block ids are
derived deterministically from event ids, so a link copied from one
rendering of a session resolves to the same block after a reload.
"""

from typing import Iterable, Optional
from urllib.parse import quote, unquote, urldefrag

from .models import DisplayBlock

FRAGMENT_PREFIX = "event-"

# Characters left unescaped in fragments, beyond alphanumerics
_FRAGMENT_SAFE = "-._~:"


def fragment_for(block_id: str) -> str:
    """Return the fragment (without ``#``) addressing ``block_id``."""
    return FRAGMENT_PREFIX + quote(block_id, safe=_FRAGMENT_SAFE, errors="surrogatepass")


def resolve_fragment(fragment: Optional[str]) -> Optional[str]:
    """Return the block id addressed by a fragment, or None.

    Accepts the fragment with or without its leading ``#``.
    """
    if not fragment:
        return None
    if fragment.startswith("#"):
        fragment = fragment[1:]
    if not fragment.startswith(FRAGMENT_PREFIX):
        return None
    block_id = unquote(fragment[len(FRAGMENT_PREFIX) :], errors="surrogatepass")
    return block_id or None


def permalink_url(base_url: str, block_id: str) -> str:
    """Return ``base_url`` with its fragment replaced by the block's."""
    url, _ = urldefrag(base_url)
    return f"{url}#{fragment_for(block_id)}"


class PermalinkIndex:
    """Lookup of every block in a compiled tree by id.

    Child blocks (tool results, command output) are addressable too.
    """

    def __init__(self, blocks: Iterable[DisplayBlock]):
        self._blocks: dict[str, DisplayBlock] = {}
        for block in blocks:
            for node in block.iter_tree():
                self._blocks.setdefault(node.id, node)

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def get(self, block_id: str) -> Optional[DisplayBlock]:
        return self._blocks.get(block_id)

    def locate(self, fragment: Optional[str]) -> Optional[DisplayBlock]:
        """Return the block addressed by a page fragment.

        Unknown or foreign fragments yield None so the page simply does not
        scroll.
        """
        block_id = resolve_fragment(fragment)
        if block_id is None:
            return None
        return self._blocks.get(block_id)

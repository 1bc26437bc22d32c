"""LRU helpers.

An LRU spells a URL as ``|``-separated stems, most significant first::

    s:http|t:8080|h:com|h:example|h:www|p:docs|p:index.html|q:a=1|f:top

``s`` is the scheme, ``t`` the port, ``h`` host labels in reverse order,
``p`` path segments, ``q`` the query and ``f`` the fragment.
"""

from __future__ import annotations

from typing import List
from urllib.parse import urlsplit


def split_lru(lru: str) -> List[tuple[str, str]]:
    """Return the (stem type, value) pairs of an LRU, skipping empty stems."""
    stems = []
    for stem in lru.split("|"):
        if not stem:
            continue
        kind, _, value = stem.partition(":")
        stems.append((kind.strip().lower(), value))
    return stems


def revert_lru(lru: str | None) -> str:
    """Rebuild the URL an LRU stands for. Unknown stems are ignored."""
    if not lru:
        return ""

    scheme = ""
    port = ""
    hosts: List[str] = []
    path: List[str] = []
    query = None
    fragment = None
    for kind, value in split_lru(lru):
        if kind == "s":
            scheme = value
        elif kind == "t":
            port = value
        elif kind == "h":
            hosts.append(value)
        elif kind == "p":
            path.append(value)
        elif kind == "q":
            query = value
        elif kind == "f":
            fragment = value

    url = f"{scheme}://" if scheme else ""
    url += ".".join(reversed(hosts))
    if port:
        url += f":{port}"
    if path:
        url += "/" + "/".join(path)
    if query is not None:
        url += f"?{query}"
    if fragment is not None:
        url += f"#{fragment}"
    return url


def url_to_lru(url: str) -> str:
    """Turn a URL into its LRU, ending with the ``|`` separator."""
    parts = urlsplit(url.strip())
    stems = []
    if parts.scheme:
        stems.append(f"s:{parts.scheme.lower()}")
    if parts.port is not None:
        stems.append(f"t:{parts.port}")
    host = (parts.hostname or "").lower()
    if host:
        stems.extend(f"h:{label}" for label in reversed(host.split(".")))
    stems.extend(f"p:{segment}" for segment in parts.path.split("/") if segment)
    if parts.query:
        stems.append(f"q:{parts.query}")
    if parts.fragment:
        stems.append(f"f:{parts.fragment}")
    return "|".join(stems) + "|"

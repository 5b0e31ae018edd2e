"""Per-term gallery id lookups against the static nozomi indexes.

Two lookup paths exist:

- Namespaced terms (``female:maid``, ``language:english``, ``artist:x``) map
  straight to a precomputed nozomi file that is downloaded whole.
- Free-text terms are hashed (first 4 bytes of SHA-256) and searched in the
  galleries B-tree, whose nodes and data blocks are read with ranged GETs.

Both paths are bound to the :class:`IndexVersions` pair passed in by the
caller, so one query resolution never mixes versions.
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import logging
import struct
import time
from typing import Protocol

from ..config import Settings
from ..domain.errors import FormatError
from ..domain.model import IndexVersions
from ..utils.transport import HttpTransport
from .decoder import decode_ids


logger = logging.getLogger(__name__)

COMPRESSED_NOZOMI_PREFIX = "n"
NOZOMI_EXTENSION = ".nozomi"
TAG_INDEX_DIR = "tagindex"
GALLERIES_INDEX_DIR = "galleriesindex"
MAX_NODE_SIZE = 464
B = 16
MAX_DATA_LENGTH = 100_000_000
MAX_GALLERY_IDS = 10_000_000


class TermLookup(Protocol):
    """What the query resolver needs from the remote index."""

    async def get_index_version(self, index_name: str) -> int: ...

    async def all_ids(self, versions: IndexVersions) -> list[int]: ...

    async def ids_for_term(self, term: str, versions: IndexVersions) -> list[int]: ...


@dataclass(frozen=True)
class Node:
    """A decoded galleries B-tree node."""

    keys: list[bytes]
    datas: list[tuple[int, int]]
    subnode_addresses: list[int]

    @property
    def is_leaf(self) -> bool:
        return not any(self.subnode_addresses)


class _Cursor:
    """Big-endian reader over a node buffer."""

    def __init__(self, payload: bytes):
        self._payload = payload
        self._offset = 0

    def _take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._payload):
            raise FormatError(f"B-tree node truncated at byte {self._offset} (wanted {size} more)")
        chunk = self._payload[self._offset : end]
        self._offset = end
        return chunk

    def int32(self) -> int:
        return struct.unpack(">i", self._take(4))[0]

    def uint64(self) -> int:
        return struct.unpack(">Q", self._take(8))[0]

    def raw(self, size: int) -> bytes:
        return self._take(size)


def decode_node(payload: bytes) -> Node:
    cursor = _Cursor(payload)

    key_count = cursor.int32()
    keys = []
    for _ in range(key_count):
        key_size = cursor.int32()
        if key_size <= 0 or key_size > 32:
            raise FormatError(f"B-tree key size {key_size} out of range")
        keys.append(cursor.raw(key_size))

    data_count = cursor.int32()
    datas = []
    for _ in range(data_count):
        offset = cursor.uint64()
        length = cursor.int32()
        datas.append((offset, length))

    subnode_addresses = [cursor.uint64() for _ in range(B + 1)]
    return Node(keys=keys, datas=datas, subnode_addresses=subnode_addresses)


def hash_term(term: str) -> bytes:
    return hashlib.sha256(term.encode("utf-8")).digest()[:4]


def compare_keys(left: bytes, right: bytes) -> int:
    """Compare two keys as unsigned bytes over their common prefix."""
    for a, b in zip(left, right):
        if a < b:
            return -1
        if a > b:
            return 1
    return 0


def locate_key(key: bytes, node: Node) -> tuple[bool, int]:
    """Return (found, position) of ``key`` among ``node.keys``."""
    cmp_result = -1
    position = 0
    for node_key in node.keys:
        cmp_result = compare_keys(key, node_key)
        if cmp_result <= 0:
            break
        position += 1
    return cmp_result == 0, position


def nozomi_path(area: str | None, tag: str, language: str) -> str:
    prefix = f"{COMPRESSED_NOZOMI_PREFIX}/{area}/" if area else f"{COMPRESSED_NOZOMI_PREFIX}/"
    return f"{prefix}{tag}-{language}{NOZOMI_EXTENSION}"


def nozomi_target(term: str) -> tuple[str | None, str, str]:
    """Map a namespaced term onto the (area, tag, language) of its nozomi file."""
    namespace, tag = term.split(":", 1)
    area: str | None = namespace
    language = "all"
    if namespace in ("female", "male"):
        area = "tag"
        tag = term
    elif namespace == "language":
        area = None
        language = tag
        tag = "index"
    return area, tag, language


class NozomiClient:
    """Default :class:`TermLookup` backed by the static nozomi host."""

    def __init__(self, settings: Settings, transport: HttpTransport):
        self.settings = settings
        self.transport = transport

    async def get_index_version(self, index_name: str) -> int:
        url = self.settings.ltn_url(f"{index_name}/version?_={int(time.time() * 1000)}")
        body = (await self.transport.get_text(url)).strip()
        try:
            return int(body)
        except ValueError as exc:
            raise FormatError(f"Index version for {index_name} is not an integer: {body[:40]!r}") from exc

    async def all_ids(self, versions: IndexVersions) -> list[int]:
        return await self.ids_from_nozomi(None, "index", "all")

    async def ids_for_term(self, term: str, versions: IndexVersions) -> list[int]:
        term = term.replace("_", " ")
        if ":" in term:
            area, tag, language = nozomi_target(term)
            return await self.ids_from_nozomi(area, tag, language)

        node = await self.node_at_address("galleries", 0, versions)
        if node is None:
            return []
        data = await self.b_search("galleries", hash_term(term), node, versions)
        if data is None:
            logger.debug("Term %r not present in galleries index %s", term, versions.gallery_index)
            return []
        return await self.ids_from_data(data, versions)

    async def ids_from_nozomi(self, area: str | None, tag: str, language: str) -> list[int]:
        url = self.settings.ltn_url(nozomi_path(area, tag, language))
        return decode_ids(await self.transport.get_bytes(url))

    def _index_url(self, field: str, versions: IndexVersions) -> str:
        if field == "galleries":
            return self.settings.ltn_url(f"{GALLERIES_INDEX_DIR}/galleries.{versions.gallery_index}.index")
        return self.settings.ltn_url(f"{TAG_INDEX_DIR}/{field}.{versions.tag_index}.index")

    async def node_at_address(self, field: str, address: int, versions: IndexVersions) -> Node | None:
        url = self._index_url(field, versions)
        response = await self.transport.ranged_get(url, address, address + MAX_NODE_SIZE - 1)
        if not response.content:
            return None
        return decode_node(response.content)

    async def b_search(self, field: str, key: bytes, node: Node, versions: IndexVersions) -> tuple[int, int] | None:
        while node.keys:
            found, position = locate_key(key, node)
            if found:
                return node.datas[position]
            if node.is_leaf:
                return None
            next_node = await self.node_at_address(field, node.subnode_addresses[position], versions)
            if next_node is None:
                return None
            node = next_node
        return None

    async def ids_from_data(self, data: tuple[int, int], versions: IndexVersions) -> list[int]:
        offset, length = data
        if length <= 0 or length > MAX_DATA_LENGTH:
            return []

        url = self.settings.ltn_url(f"{GALLERIES_INDEX_DIR}/galleries.{versions.gallery_index}.data")
        payload = (await self.transport.ranged_get(url, offset, offset + length - 1)).content
        if len(payload) < 4:
            return []

        count = struct.unpack(">i", payload[:4])[0]
        if count <= 0 or count > MAX_GALLERY_IDS or len(payload) != count * 4 + 4:
            logger.debug("Discarding galleries data block at %s: count=%s size=%s", offset, count, len(payload))
            return []
        return decode_ids(payload[4:])

# -*- coding: utf-8 -*-
"""Food datasets: locating dataset objects across naming conventions.

Each storage convention is a :class:`DatasetFormat`: name templates plus an
ordered list of folder templates. Candidate paths are generated from that data
and probed lazily, so a new convention is a new format entry, not a new branch.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import DatasetNotFound, ObjectNotFound
from .store import StoredObject, join_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetFormat:
    key: str
    # Folder templates in probe order; "" is the store root. Placeholders: {lang}, {folder}.
    folders: Tuple[str, ...]
    single_name: Optional[str] = None
    part_name: Optional[str] = None
    folder_aliases: Dict[str, str] = field(default_factory=dict)
    media_type: str = "application/octet-stream"
    listing_error: str = "Dataset not found"
    object_error: str = "Object not found"

    def folder_for(self, lang: str) -> str:
        return self.folder_aliases.get(lang, lang)

    def folders_for(self, lang: str) -> List[str]:
        folder = self.folder_for(lang)
        return [tpl.format(lang=lang, folder=folder).strip("/") for tpl in self.folders]

    def names_for(self, lang: str, part: Optional[int] = None) -> List[str]:
        names: List[str] = []
        if self.single_name and (part is None or part == 1):
            names.append(self.single_name.format(lang=lang))
        if self.part_name and part is not None:
            names.append(self.part_name.format(lang=lang, part=part))
        return names

    def part_index(self, lang: str, name: str) -> Optional[int]:
        """1-based part index encoded in ``name``; the single-file name counts as part 1."""
        if self.single_name and name == self.single_name.format(lang=lang):
            return 1
        if not self.part_name:
            return None
        head, _, tail = self.part_name.partition("{part}")
        pattern = re.escape(head.format(lang=lang)) + r"(\d+)" + re.escape(tail.format(lang=lang))
        m = re.fullmatch(pattern, name)
        if not m:
            return None
        index = int(m.group(1))
        return index if index >= 1 else None


JSON_PARTS = DatasetFormat(
    key="json",
    folders=("{folder}", "", "json"),
    single_name="{lang}.json.gz",
    part_name="{lang}_part{part}.json.gz",
    media_type="application/gzip",
    listing_error="JSON files not found",
    object_error="Part not found",
)

# Legacy binary chunks; the US dataset lives under the "en" folder.
CHUNKS = DatasetFormat(
    key="chunks",
    folders=("{folder}", "", "chunks/{folder}"),
    part_name="foods_{lang}_chunk{part}.part.gz",
    folder_aliases={"us": "en"},
    media_type="application/gzip",
    listing_error="Chunks not found",
    object_error="Chunk not found",
)

CHUNKS_MANIFEST = DatasetFormat(
    key="chunks-manifest",
    folders=("{folder}", "", "chunks/{folder}", "{folder}/chunks"),
    single_name="chunks_info.json",
    folder_aliases={"us": "en"},
    media_type="application/json",
    listing_error="Chunks info not found",
    object_error="Chunks info not found",
)

SQLITE = DatasetFormat(
    key="sqlite",
    folders=("", "sqlite"),
    single_name="foods_{lang}.sqlite",
    media_type="application/octet-stream",
    listing_error="File not found",
    object_error="File not found",
)


@dataclass(frozen=True)
class DatasetPart:
    lang: str
    index: int
    path: str
    name: str
    size: Optional[int] = None
    modified_at: Optional[datetime] = None

    @classmethod
    def from_object(cls, lang: str, index: int, obj: StoredObject) -> "DatasetPart":
        return cls(
            lang=lang,
            index=index,
            path=obj.path,
            name=obj.name,
            size=obj.size,
            modified_at=obj.modified_at,
        )


def _preference(fmt: DatasetFormat, lang: str, index: int, name: str) -> int:
    names = fmt.names_for(lang, index)
    return names.index(name) if name in names else len(names)


def candidate_paths(fmt: DatasetFormat, lang: str, part: Optional[int] = None) -> Iterator[str]:
    """Yield object paths for one dataset object in probe order."""
    for folder in fmt.folders_for(lang):
        for name in fmt.names_for(lang, part):
            yield join_path(folder, name)


class DatasetLocator:
    def __init__(self, store) -> None:
        self.store = store

    async def locate(self, fmt: DatasetFormat, lang: str, part: Optional[int] = None) -> StoredObject:
        """Return the first existing candidate for (lang, part); candidates are never merged."""
        tried: List[str] = []
        for path in candidate_paths(fmt, lang, part):
            tried.append(path)
            try:
                obj = await self.store.stat(path)
            except ObjectNotFound:
                continue
            logger.debug("Resolved %s/%s part=%s to %s", fmt.key, lang, part, path)
            return obj
        raise DatasetNotFound(fmt.object_error, details=f"tried {', '.join(tried)}")

    async def list_parts(self, fmt: DatasetFormat, lang: str) -> List[DatasetPart]:
        """Parts of the first folder holding any match, ordered by part index.

        One entry per index, chosen by the same name preference as :meth:`locate`
        (the single file shadows ``{lang}_part1``), so listed part N is always the
        object a download of part N returns.
        """
        folders = fmt.folders_for(lang)
        for folder in folders:
            by_index: Dict[int, DatasetPart] = {}
            for obj in await self.store.list(folder):
                index = fmt.part_index(lang, obj.name)
                if index is None:
                    continue
                current = by_index.get(index)
                if current is None or _preference(fmt, lang, index, obj.name) < _preference(
                    fmt, lang, index, current.name
                ):
                    by_index[index] = DatasetPart.from_object(lang, index, obj)
            if by_index:
                return [by_index[i] for i in sorted(by_index)]
        searched = ", ".join(f or "<root>" for f in folders)
        raise DatasetNotFound(fmt.listing_error, details=f"no {fmt.key} objects for '{lang}' in {searched}")

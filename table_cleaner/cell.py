from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Union

from .attributes import parse_cell_attributes, parse_span, replace_rowspan
from .attributes import strip_images as remove_images

CellMatch = Union[re.Match, Mapping[str, str]]
AttributeParser = Callable[[str], Mapping[str, str]]


@dataclass(slots=True, eq=False)
class TableCell:
    """One logical table cell.

    Origin cells come straight from a matched ``<td>``/``<th>`` fragment.
    Span-reference cells fill the extra grid slots an origin covers and point
    back to it through ``parent``. Cells compare by identity, so the same
    origin can be recognised wherever its references end up.
    """

    content: str = ""
    is_header: bool = False
    rowspan: int = 1
    colspan: int = 1
    parent: TableCell | None = None
    name: str = "td"
    attribs: str = ""
    _source_rowspan: int = field(default=1, repr=False)

    @classmethod
    def from_match(
        cls,
        raw: CellMatch,
        parse_attributes: AttributeParser = parse_cell_attributes,
    ) -> TableCell:
        fields = raw.groupdict() if isinstance(raw, re.Match) else raw
        name = (fields.get("name") or "td").lower()
        attribs = fields.get("attribs") or ""
        attributes = parse_attributes(attribs)
        rowspan = parse_span(attributes.get("rowspan"))
        return cls(
            content=fields.get("content") or "",
            is_header=name == "th",
            rowspan=rowspan,
            colspan=parse_span(attributes.get("colspan")),
            name=name,
            attribs=attribs,
            _source_rowspan=rowspan,
        )

    @classmethod
    def span_child(cls, origin: TableCell) -> TableCell:
        return cls(
            is_header=origin.is_header,
            rowspan=origin.rowspan,
            colspan=origin.colspan,
            parent=origin,
            name=origin.name,
        )

    @property
    def is_origin(self) -> bool:
        return self.parent is None

    def get_trimmed_content(self, strip_images: bool) -> str:
        content = remove_images(self.content) if strip_images else self.content
        return content.strip()

    def decrement_rowspan(self) -> None:
        if self.rowspan > 1:
            self.rowspan -= 1

    def to_html(self) -> str:
        if self.parent is not None:
            return ""
        attribs = self.attribs
        if self.rowspan != self._source_rowspan:
            attribs = replace_rowspan(attribs, self.rowspan)
        return f"<{self.name}{attribs}>{self.content}</{self.name}>"

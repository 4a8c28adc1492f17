"""Append-only output sinks fed by a single decode pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Link:
    """Hyperlink found while decoding."""

    href: str
    text: str = ""
    rel: Optional[str] = None


class TextSink:
    """Collects body text; the final string is built once decoding is done."""

    def __init__(self) -> None:
        self._parts: List[str] = []

    def write(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def __str__(self) -> str:
        return "".join(self._parts)


class LinkSink:
    """Collects hyperlinks in document order."""

    def __init__(self) -> None:
        self._links: List[Link] = []

    def add(self, link: Link) -> None:
        if link.href:
            self._links.append(link)

    @property
    def links(self) -> Tuple[Link, ...]:
        return tuple(self._links)

    def __len__(self) -> int:
        return len(self._links)


class TeeSink:
    """Fans decoder events out to a text sink and a link sink.

    Decoders emit anchor text through ``text`` themselves; ``link`` only
    records the hyperlink.
    """

    def __init__(self, text: TextSink, links: LinkSink) -> None:
        self.text_sink = text
        self.link_sink = links

    def text(self, value: str) -> None:
        self.text_sink.write(value)

    def newline(self) -> None:
        self.text_sink.write("\n")

    def link(self, href: str, text: str = "", rel: Optional[str] = None) -> None:
        self.link_sink.add(Link(href=href, text=text, rel=rel))


__all__ = ["Link", "LinkSink", "TeeSink", "TextSink"]

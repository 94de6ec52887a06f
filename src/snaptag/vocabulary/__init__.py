"""Master tag vocabulary shared across all images."""

from __future__ import annotations

from typing import Collection, Iterable, Iterator, List


def _sort_key(tag: str) -> tuple[str, str]:
    return tag.casefold(), tag


class TagVocabulary:
    """Ordered, case-insensitively unique collection of known tags.

    Tags exist independently of any image. The spelling that was added first
    is the one that is kept.
    """

    def __init__(self, tags: Iterable[str] = ()) -> None:
        self._tags: List[str] = []
        self._folded: set[str] = set()
        self.add_all(tags)

    def add(self, tag: str) -> bool:
        """Store ``tag`` unless an equal-ignoring-case tag is already known.

        Returns:
            bool: True when the vocabulary changed.
        """
        folded = tag.casefold()
        if folded in self._folded:
            return False
        self._folded.add(folded)
        self._tags.append(tag)
        self._tags.sort(key=_sort_key)
        return True

    def add_all(self, tags: Iterable[str]) -> List[str]:
        """Add every tag in ``tags`` and return the ones that were new."""
        return [tag for tag in tags if self.add(tag)]

    def remove(self, tag: str) -> bool:
        """Delete ``tag`` if stored with exactly this spelling.

        Returns:
            bool: True when the vocabulary changed.
        """
        if tag not in self._tags:
            return False
        self._tags.remove(tag)
        self._folded.discard(tag.casefold())
        return True

    def list(
        self,
        exclude: Collection[str] = (),
        must_contain: str = "",
    ) -> List[str]:
        """Return stored tags in case-insensitive alphabetical order.

        Args:
            exclude: Tags to leave out (compared ignoring case).
            must_contain: Substring every returned tag must contain, ignoring case.

        Returns:
            list[str]: Matching tags.
        """
        excluded = {tag.casefold() for tag in exclude}
        needle = must_contain.casefold()
        return [
            tag
            for tag in self._tags
            if tag.casefold() not in excluded and needle in tag.casefold()
        ]

    def snapshot(self) -> List[str]:
        """Return a copy of the stored tags suitable for persistence."""
        return list(self._tags)

    def find(self, tag: str) -> str | None:
        """Return the stored spelling of ``tag`` (ignoring case), or None."""
        folded = tag.casefold()
        return next((known for known in self._tags if known.casefold() == folded), None)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.casefold() in self._folded

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tags))

    def __len__(self) -> int:
        return len(self._tags)


__all__ = ["TagVocabulary"]

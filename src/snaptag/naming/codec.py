"""Encode and decode the tag grammar embedded in image file names.

A tagged file name has the shape ``<base>( @<tag>)*.<ext>``. The tag run is the
trailing sequence of ``" @<alnum>"`` groups in the stem (the part of the name
before the last ``.``); everything ahead of it is the base name. Nothing else
in the project knows that tags live in file names.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, NamedTuple

TAG_MARKER = " @"
EXTENSION_SEPARATOR = "."
IMAGE_EXTENSIONS: tuple[str, ...] = ("png", "jpg", "jpeg")

_TAG_PATTERN = re.compile(r"[A-Za-z0-9]+")
_TAG_RUN = re.compile(r"(?: @[A-Za-z0-9]+)+$")

PathInput = str | os.PathLike[str]


class InvalidTagError(ValueError):
    """Raised when a tag does not match the ``[A-Za-z0-9]+`` grammar."""


class ParsedName(NamedTuple):
    """Structural decomposition of a file name.

    Attributes:
        base: Name ahead of the first tag marker (or the extension).
        tags: Tags in the order they appear in the name.
        extension: Extension including its leading separator, or ``""``.
    """

    base: str
    tags: tuple[str, ...]
    extension: str

    def render(self) -> str:
        """Return the file name described by this decomposition."""
        return self.base + "".join(f"{TAG_MARKER}{tag}" for tag in self.tags) + self.extension


def is_valid_tag(tag: str) -> bool:
    """Return whether ``tag`` is a non-empty alphanumeric run."""
    return isinstance(tag, str) and _TAG_PATTERN.fullmatch(tag) is not None


def validate_tag(tag: str) -> str:
    """Return ``tag`` unchanged or raise :class:`InvalidTagError`.

    Args:
        tag: Candidate tag supplied by a caller.

    Returns:
        str: The validated tag.

    Raises:
        InvalidTagError: If the tag is empty or contains characters outside
            ``[A-Za-z0-9]``.
    """
    if not is_valid_tag(tag):
        raise InvalidTagError(f"Invalid tag {tag!r}; tags must be letters and digits only.")
    return tag


def parse_name(name: str) -> ParsedName:
    """Split a bare file name into base, tags, and extension."""
    dot = name.rfind(EXTENSION_SEPARATOR)
    if dot <= 0:
        stem, extension = name, ""
    else:
        stem, extension = name[:dot], name[dot:]

    match = _TAG_RUN.search(stem)
    if match is None:
        return ParsedName(stem, (), extension)

    groups = match.group(0)[len(TAG_MARKER) :].split(TAG_MARKER)
    base = stem[: match.start()]
    # A name that is nothing but tags keeps its first group as the base.
    if not base:
        base = TAG_MARKER + groups.pop(0)
    return ParsedName(base, tuple(groups), extension)


def get_full_name(path: PathInput) -> str:
    """Return the file name including tags and extension."""
    return Path(path).name


def get_directory(path: PathInput) -> Path:
    """Return the directory component of ``path`` without touching the disk."""
    return Path(path).parent


def get_base_name(path: PathInput) -> str:
    """Return the name without tags or extension."""
    return parse_name(get_full_name(path)).base


def get_tags(path: PathInput) -> list[str]:
    """Return the image's tags sorted case-insensitively.

    Case variants collapse onto the first spelling that appears in the name.
    """
    seen: dict[str, str] = {}
    for tag in parse_name(get_full_name(path)).tags:
        seen.setdefault(tag.casefold(), tag)
    return sorted(seen.values(), key=_sort_key)


def contains_tag(path: PathInput) -> bool:
    """Return whether the file name carries at least one tag."""
    return bool(parse_name(get_full_name(path)).tags)


def has_tag(path: PathInput, tag: str) -> bool:
    """Return whether the image carries ``tag``, ignoring case.

    The match is bounded by the tag marker on the left and by another marker or
    the extension on the right, so ``ab`` never matches inside ``abc``.
    """
    if not is_valid_tag(tag):
        return False
    wanted = tag.casefold()
    return any(existing.casefold() == wanted for existing in parse_name(get_full_name(path)).tags)


def has_all_tags(path: PathInput, tags: Iterable[str]) -> bool:
    """Return whether the image carries every tag in ``tags``."""
    return all(has_tag(path, tag) for tag in tags)


def add_tag(path: PathInput, tag: str) -> Path:
    """Return ``path`` with ``tag`` inserted ahead of the extension.

    Raises:
        InvalidTagError: If ``tag`` is malformed.
    """
    validate_tag(tag)
    source = Path(path)
    parsed = parse_name(source.name)
    if tag in parsed.tags:
        return source
    return source.with_name(parsed._replace(tags=parsed.tags + (tag,)).render())


def remove_tag(path: PathInput, tag: str) -> Path:
    """Return ``path`` without the first exact occurrence of ``tag``.

    Raises:
        InvalidTagError: If ``tag`` is malformed.
    """
    validate_tag(tag)
    source = Path(path)
    parsed = parse_name(source.name)
    if tag not in parsed.tags:
        return source
    remaining = list(parsed.tags)
    remaining.remove(tag)
    return source.with_name(parsed._replace(tags=tuple(remaining)).render())


def rename(path: PathInput, new_base_name: str) -> Path:
    """Return ``path`` with only its base name replaced."""
    source = Path(path)
    parsed = parse_name(source.name)
    return source.with_name(parsed._replace(base=new_base_name).render())


def move(path: PathInput, new_directory: PathInput) -> Path:
    """Return ``path`` relocated to ``new_directory`` with its name intact."""
    return Path(new_directory) / get_full_name(path)


def rename_full_name(path: PathInput, new_full_name: str) -> Path:
    """Return ``path`` with name, tags, and extension replaced wholesale."""
    return Path(path).with_name(new_full_name)


def is_image(path: PathInput, extensions: Iterable[str] = IMAGE_EXTENSIONS) -> bool:
    """Return whether ``path`` has one of ``extensions`` (case-insensitive)."""
    suffix = Path(path).suffix.lower().lstrip(".")
    if not suffix:
        return False
    return suffix in {extension.lower().lstrip(".") for extension in extensions}


def _sort_key(value: str) -> tuple[str, str]:
    return value.casefold(), value


__all__ = [
    "EXTENSION_SEPARATOR",
    "IMAGE_EXTENSIONS",
    "InvalidTagError",
    "ParsedName",
    "TAG_MARKER",
    "add_tag",
    "contains_tag",
    "get_base_name",
    "get_directory",
    "get_full_name",
    "get_tags",
    "has_all_tags",
    "has_tag",
    "is_image",
    "is_valid_tag",
    "move",
    "parse_name",
    "remove_tag",
    "rename",
    "rename_full_name",
    "validate_tag",
]

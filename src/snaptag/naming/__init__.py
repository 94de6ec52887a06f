"""File-name tag grammar for snaptag."""

from .codec import (
    EXTENSION_SEPARATOR,
    IMAGE_EXTENSIONS,
    TAG_MARKER,
    InvalidTagError,
    ParsedName,
    add_tag,
    contains_tag,
    get_base_name,
    get_directory,
    get_full_name,
    get_tags,
    has_all_tags,
    has_tag,
    is_image,
    is_valid_tag,
    move,
    parse_name,
    remove_tag,
    rename,
    rename_full_name,
    validate_tag,
)

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

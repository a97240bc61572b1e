"""
Normalize one user supplied tag entry into ``TagDescriptor`` records.

An entry is either a path string or a mapping. A mapping carrying a
``glob``/``glob_path`` pair expands into one descriptor per matched file.
"""

import glob as _glob
import posixpath
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Union

from plugins.html_tags.errors import ConfigurationError
from plugins.html_tags.paths import slash
from plugins.html_tags.predicates import (
    ATTRIBUTES_TEXT,
    is_array,
    is_asset_type,
    is_boolean,
    is_callable_returning_string,
    is_plain_object,
    is_string,
    is_valid_attribute_value,
)

PathTransform = Callable[[str, str], str]
GlobFunc = Callable[[str, str], List[str]]

TAG_KEYS = frozenset(
    {
        "path",
        "type",
        "append",
        "public_path",
        "hash",
        "source_path",
        "attributes",
        "external",
        "glob",
        "glob_path",
    }
)


@dataclass(frozen=True)
class External:
    """A script that resolves at runtime to a global instead of being bundled."""

    package_name: str
    variable_name: str


@dataclass(frozen=True)
class TagDescriptor:
    path: str
    type: Optional[str] = None
    append: Optional[bool] = None
    public_path: Union[bool, PathTransform, None] = None
    hash: Union[bool, PathTransform, None] = None
    source_path: Optional[str] = None
    attributes: Mapping[str, Union[str, bool, int, float]] = field(default_factory=lambda: MappingProxyType({}))
    external: Optional[External] = None


def expand_glob(pattern: str, base_dir: str) -> List[str]:
    """Return the paths matching ``pattern`` under ``base_dir``, relative and sorted.

    ``**`` matches any number of directories, including none.
    """
    return sorted(slash(match) for match in _glob.glob(pattern, root_dir=base_dir, recursive=True))


def _check_transform(tag: Mapping[str, Any], key: str, item_path: str) -> None:
    value = tag.get(key)
    if value is not None and not (is_boolean(value) or is_callable_returning_string(value)):
        raise ConfigurationError(
            f"{item_path}.{key} should be a boolean or function that returns a string ({value!r})"
        )


def _parse_external(value: Any, item_path: str) -> External:
    if not is_plain_object(value):
        raise ConfigurationError(f"{item_path}.external should be an object ({value!r})")
    package_name = value.get("package_name")
    variable_name = value.get("variable_name")
    if not is_string(package_name):
        raise ConfigurationError(
            f"{item_path}.external should have a string package_name property ({package_name!r})"
        )
    if not is_string(variable_name):
        raise ConfigurationError(
            f"{item_path}.external should have a string variable_name property ({variable_name!r})"
        )
    return External(package_name=package_name, variable_name=variable_name)


def normalize_tag(tag: Any, item_path: str, glob_func: GlobFunc = expand_glob) -> List[TagDescriptor]:
    """Validate one tag entry and return its descriptors.

    Args:
        tag: A path string or a tag mapping.
        item_path: Option path used in error messages, e.g. ``html_tags.tags[1]``.
        glob_func: Expands ``(pattern, base_dir)`` into relative paths.

    Returns:
        At least one descriptor; glob matches keep the order ``glob_func`` returns.
    """
    if is_string(tag):
        return [TagDescriptor(path=tag)]
    if not is_plain_object(tag):
        raise ConfigurationError(f"{item_path} items must be an object or string ({tag!r})")

    unknown = sorted(set(tag) - TAG_KEYS)
    if unknown:
        raise ConfigurationError(f"{item_path} has unknown properties ({', '.join(map(str, unknown))})")

    has_glob = "glob" in tag or "glob_path" in tag
    path = tag.get("path")
    if not is_string(path) and not (has_glob and path is None):
        raise ConfigurationError(f"{item_path} object must have a string path property ({path!r})")

    if tag.get("type") is not None and not is_asset_type(tag["type"]):
        raise ConfigurationError(f"{item_path}.type must be css or js ({tag['type']!r})")

    if tag.get("append") is not None and not is_boolean(tag["append"]):
        raise ConfigurationError(f"{item_path}.append should be a boolean ({tag['append']!r})")

    _check_transform(tag, "public_path", item_path)
    _check_transform(tag, "hash", item_path)

    if tag.get("source_path") is not None and not is_string(tag["source_path"]):
        raise ConfigurationError(
            f"{item_path}.source_path should be a string ({tag['source_path']!r})"
        )

    attributes = tag.get("attributes")
    if attributes is None:
        attributes = {}
    if not is_plain_object(attributes):
        raise ConfigurationError(f"{item_path}.attributes should be an object ({attributes!r})")
    for name, value in attributes.items():
        if not is_valid_attribute_value(value):
            raise ConfigurationError(
                f"{item_path}.attributes.{name} should be one of {ATTRIBUTES_TEXT} ({value!r})"
            )

    external = None
    if tag.get("external") is not None:
        external = _parse_external(tag["external"], item_path)

    descriptor = TagDescriptor(
        path=path or "",
        type=tag.get("type"),
        append=tag.get("append"),
        public_path=tag.get("public_path"),
        hash=tag.get("hash"),
        source_path=tag.get("source_path"),
        attributes=MappingProxyType(dict(attributes)),
        external=external,
    )

    if not has_glob:
        return [descriptor]

    pattern = tag.get("glob")
    glob_path = tag.get("glob_path")
    if not is_string(pattern):
        raise ConfigurationError(f"{item_path}.glob should be a string ({pattern!r})")
    if not is_string(glob_path):
        raise ConfigurationError(f"{item_path}.glob_path should be a string ({glob_path!r})")

    matches = glob_func(pattern, glob_path)
    if not matches:
        raise ConfigurationError(
            f"{item_path} glob found no files ({descriptor.path!r} {pattern!r} {glob_path!r})"
        )
    base = slash(descriptor.path)
    return [
        replace(descriptor, path=posixpath.normpath(posixpath.join(base, slash(match))))
        for match in matches
    ]


def normalize_tags(
    value: Any, option_name: str, option_path: str, glob_func: GlobFunc = expand_glob
) -> List[TagDescriptor]:
    """Normalize the ``tags``/``links``/``scripts`` option (string, object or list)."""
    if is_array(value):
        descriptors: List[TagDescriptor] = []
        for index, item in enumerate(value):
            descriptors.extend(normalize_tag(item, f"{option_path}.{option_name}[{index}]", glob_func))
        return descriptors
    if is_string(value) or is_plain_object(value):
        return normalize_tag(value, f"{option_path}.{option_name}", glob_func)
    raise ConfigurationError(
        f"{option_path}.{option_name} should be a string, object, or array ({value!r})"
    )

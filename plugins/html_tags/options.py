"""
Validate the plugin options and aggregate every declared tag into four ordered
buckets: css prepend, css append, js prepend and js append.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, List, Mapping, Optional, Tuple

from plugins.html_tags.errors import ConfigurationError
from plugins.html_tags.extensions import ExtensionClassifier
from plugins.html_tags.predicates import (
    ASSET_TYPE_CSS,
    ASSET_TYPE_JS,
    is_array_of_strings,
    is_boolean,
    is_callable_returning_string,
    is_plain_object,
    is_string,
)
from plugins.html_tags.tags import GlobFunc, PathTransform, TagDescriptor, expand_glob, normalize_tags

OPTION_PATH = "html_tags"

OPTION_KEYS = frozenset(
    {
        "append",
        "public_path",
        "use_public_path",
        "add_public_path",
        "hash",
        "use_hash",
        "add_hash",
        "js_extensions",
        "css_extensions",
        "tags",
        "links",
        "scripts",
        "files",
        "html_plugin_name",
    }
)


def default_add_public_path(path: str, public_path: str) -> str:
    """Join ``public_path`` and ``path`` with exactly one slash between them."""
    if not public_path:
        return path
    return public_path.rstrip("/") + "/" + path.lstrip("/")


def default_add_hash(path: str, build_hash: str) -> str:
    return f"{path}?{build_hash}"


@dataclass(frozen=True)
class ResolvedOptions:
    """Validated options. Computed once per build and never mutated."""

    links: Tuple[TagDescriptor, ...] = ()
    scripts: Tuple[TagDescriptor, ...] = ()
    css_prepend: Tuple[TagDescriptor, ...] = ()
    css_append: Tuple[TagDescriptor, ...] = ()
    js_prepend: Tuple[TagDescriptor, ...] = ()
    js_append: Tuple[TagDescriptor, ...] = ()
    append: bool = True
    use_public_path: bool = True
    add_public_path: PathTransform = default_add_public_path
    use_hash: bool = False
    add_hash: PathTransform = default_add_hash
    files: Optional[Tuple[str, ...]] = None
    html_plugin_name: Optional[str] = None


def resolve_shortcuts(
    options: Mapping[str, Any],
    option_path: str,
    shortcut_key: str,
    use_key: str,
    add_key: str,
    use_default: bool,
    add_default: PathTransform,
) -> Tuple[bool, PathTransform]:
    """Collapse a shorthand option family into an ``(enabled, transform)`` pair.

    Either the fine grained ``use_*``/``add_*`` pair or the ``shortcut_key``
    shorthand may be given, never both. A string shorthand replaces the
    runtime value handed to ``add_default`` with the string itself.
    """
    use, add = use_default, add_default
    use_value = options.get(use_key)
    add_value = options.get(add_key)
    shortcut = options.get(shortcut_key)

    if use_value is not None or add_value is not None:
        if shortcut is not None:
            raise ConfigurationError(
                f"{option_path}.{shortcut_key} should not be used with either {use_key} or {add_key}"
            )
        if use_value is not None:
            if not is_boolean(use_value):
                raise ConfigurationError(f"{option_path}.{use_key} should be a boolean ({use_value!r})")
            use = use_value
        if add_value is not None:
            if not is_callable_returning_string(add_value):
                raise ConfigurationError(
                    f"{option_path}.{add_key} should be a function that returns a string ({add_value!r})"
                )
            add = add_value
    elif shortcut is not None:
        if is_boolean(shortcut):
            use = shortcut
        elif is_string(shortcut):

            def add_fixed(path: str, _runtime_value: str) -> str:
                return add_default(path, shortcut)

            use, add = True, add_fixed
        elif is_callable_returning_string(shortcut):
            use, add = True, shortcut
        else:
            raise ConfigurationError(
                f"{option_path}.{shortcut_key} should be a boolean or a string or a function "
                f"that returns a string ({shortcut!r})"
            )
    return use, add


def _bind_type(
    descriptors: List[TagDescriptor], asset_type: str, option_name: str, option_path: str
) -> List[TagDescriptor]:
    bound = []
    for descriptor in descriptors:
        if descriptor.type is not None and descriptor.type != asset_type:
            raise ConfigurationError(
                f"{option_path}.{option_name} items are always {asset_type} ({descriptor.path!r} "
                f"declares type {descriptor.type!r})"
            )
        bound.append(replace(descriptor, type=asset_type))
    return bound


def _classify(
    descriptors: List[TagDescriptor], classifier: ExtensionClassifier, option_name: str, option_path: str
) -> List[TagDescriptor]:
    classified = []
    for descriptor in descriptors:
        asset_type = descriptor.type or classifier.classify(descriptor.path)
        if asset_type is None:
            raise ConfigurationError(
                f"{option_path}.{option_name} could not determine asset type for ({descriptor.path!r})"
            )
        classified.append(replace(descriptor, type=asset_type))
    return classified


def _apply_append(descriptors: List[TagDescriptor], append: bool) -> List[TagDescriptor]:
    return [d if d.append is not None else replace(d, append=append) for d in descriptors]


def _check_externals(descriptors: List[TagDescriptor], option_name: str, option_path: str) -> None:
    for descriptor in descriptors:
        if descriptor.type != ASSET_TYPE_JS and descriptor.external is not None:
            raise ConfigurationError(
                f"{option_path}.{option_name}.external should not be used on non script tags "
                f"({descriptor.path!r})"
            )


def get_validated_options(
    options: Mapping[str, Any], option_path: str = OPTION_PATH, glob_func: GlobFunc = expand_glob
) -> ResolvedOptions:
    """Validate raw plugin options and return the immutable resolved form.

    ``None`` values are treated as absent, so a MkDocs config with unset
    options can be passed through unchanged.

    Raises:
        ConfigurationError: On any malformed or conflicting option.
    """
    if not is_plain_object(options):
        raise ConfigurationError(f"{option_path} should be an object ({options!r})")

    unknown = sorted(set(options) - OPTION_KEYS)
    if unknown:
        raise ConfigurationError(f"{option_path} has unknown options ({', '.join(map(str, unknown))})")

    append = True
    if options.get("append") is not None:
        if not is_boolean(options["append"]):
            raise ConfigurationError(f"{option_path}.append should be a boolean ({options['append']!r})")
        append = options["append"]

    use_public_path, add_public_path = resolve_shortcuts(
        options, option_path, "public_path", "use_public_path", "add_public_path", True, default_add_public_path
    )
    use_hash, add_hash = resolve_shortcuts(
        options, option_path, "hash", "use_hash", "add_hash", False, default_add_hash
    )

    classifier = ExtensionClassifier.from_options(options, option_path)

    links: List[TagDescriptor] = []
    scripts: List[TagDescriptor] = []

    if options.get("tags") is not None:
        tags = normalize_tags(options["tags"], "tags", option_path, glob_func)
        tags = _apply_append(_classify(tags, classifier, "tags", option_path), append)
        _check_externals(tags, "tags", option_path)
        links.extend(d for d in tags if d.type == ASSET_TYPE_CSS)
        scripts.extend(d for d in tags if d.type == ASSET_TYPE_JS)

    if options.get("links") is not None:
        tags = normalize_tags(options["links"], "links", option_path, glob_func)
        tags = _apply_append(_bind_type(tags, ASSET_TYPE_CSS, "links", option_path), append)
        _check_externals(tags, "links", option_path)
        links.extend(tags)

    if options.get("scripts") is not None:
        tags = normalize_tags(options["scripts"], "scripts", option_path, glob_func)
        scripts.extend(_apply_append(_bind_type(tags, ASSET_TYPE_JS, "scripts", option_path), append))

    files = options.get("files")
    if files is not None:
        if is_string(files):
            files = [files]
        elif not is_array_of_strings(files):
            raise ConfigurationError(f"{option_path}.files should be a string or array of strings ({files!r})")
        files = tuple(files)

    html_plugin_name = options.get("html_plugin_name")
    if html_plugin_name is not None and not is_string(html_plugin_name):
        raise ConfigurationError(f"{option_path}.html_plugin_name should be a string ({html_plugin_name!r})")

    return ResolvedOptions(
        links=tuple(links),
        scripts=tuple(scripts),
        css_prepend=tuple(d for d in links if not d.append),
        css_append=tuple(d for d in links if d.append),
        js_prepend=tuple(d for d in scripts if not d.append),
        js_append=tuple(d for d in scripts if d.append),
        append=append,
        use_public_path=use_public_path,
        add_public_path=add_public_path,
        use_hash=use_hash,
        add_hash=add_hash,
        files=files,
        html_plugin_name=html_plugin_name,
    )

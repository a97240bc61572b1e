"""
Compute the final, servable path of an injected tag.
"""

from typing import TYPE_CHECKING

from plugins.html_tags.predicates import is_callable

if TYPE_CHECKING:
    from plugins.html_tags.options import ResolvedOptions
    from plugins.html_tags.tags import TagDescriptor


def slash(path: str) -> str:
    """Convert Windows separators to the forward slashes HTML expects."""
    return path.replace("\\", "/")


def resolve_tag_path(
    tag: "TagDescriptor",
    options: "ResolvedOptions",
    public_path: str,
    build_hash: str,
) -> str:
    """Apply the public path step, then the hash step, to ``tag.path``.

    A per-tag ``public_path``/``hash`` value wins over the global policy:
    ``True`` uses the global transform, a callable replaces it and ``False``
    disables the step. When the tag leaves it unset the global ``use_*`` flag
    decides.
    """
    path = tag.path

    if tag.public_path is not None:
        if tag.public_path is True:
            path = options.add_public_path(path, public_path)
        elif is_callable(tag.public_path):
            path = tag.public_path(path, public_path)
    elif options.use_public_path:
        path = options.add_public_path(path, public_path)

    if tag.hash is not None:
        if tag.hash is True:
            path = options.add_hash(path, build_hash)
        elif is_callable(tag.hash):
            path = tag.hash(path, build_hash)
    elif options.use_hash:
        path = options.add_hash(path, build_hash)

    return slash(path)

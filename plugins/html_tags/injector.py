"""
Per document injection: splice the resolved tag paths into a document's asset
lists and copy declared attributes back onto the rendered tag nodes.

This module knows nothing about MkDocs. A host hands it an ``HtmlDocument``
twice: once before the asset tags are rendered (``before_generation``) and
once after (``alter_tags``).
"""

import logging
from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from wcmatch import glob as wcglob

from plugins.html_tags.errors import HostIntegrationError, RegistrationError
from plugins.html_tags.options import ResolvedOptions
from plugins.html_tags.paths import resolve_tag_path
from plugins.html_tags.tags import TagDescriptor

logger = logging.getLogger(f"mkdocs.plugins.{__name__}")


@dataclass
class DocumentAssets:
    public_path: str
    css: List[str] = field(default_factory=list)
    js: List[str] = field(default_factory=list)


@dataclass
class HtmlDocument:
    """A document in progress, as exposed by the host.

    ``head`` and ``body`` hold rendered tag nodes once the host has created
    them: the link nodes and the script nodes, each in document order. A node only needs a ``name`` and a mutable ``attrs`` mapping, which
    is what a BeautifulSoup ``Tag`` provides. ``register_file`` registers an
    on-disk file as a build output; it may return a ``Future``.
    """

    output_name: str
    assets: DocumentAssets
    head: List[Any] = field(default_factory=list)
    body: List[Any] = field(default_factory=list)
    register_file: Optional[Callable[[str], Any]] = None


class TagsInjector:
    def __init__(self, options: ResolvedOptions):
        self.options = options

    def register_externals(self, externals: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Merge every script's ``external`` into ``externals`` (package -> global)."""
        if externals is None:
            externals = {}
        for script in self.options.scripts:
            if script.external is not None:
                externals[script.external.package_name] = script.external.variable_name
        return externals

    def apply(self, host_plugins: Iterable[str]) -> None:
        """Check that the configured HTML plugin is present among ``host_plugins``."""
        name = self.options.html_plugin_name
        if name is not None and name not in host_plugins:
            raise HostIntegrationError(
                f"[html_tags] the '{name}' plugin was not found, "
                "are you sure it is listed before html-tags in your plugins?"
            )

    def should_skip(self, output_name: str) -> bool:
        """True when ``files`` is set and no pattern matches; ``*`` stops at ``/``, ``**`` does not."""
        if self.options.files is None:
            return False
        return not wcglob.globmatch(output_name, list(self.options.files), flags=wcglob.GLOBSTAR)

    def before_generation(self, document: HtmlDocument, build_hash: str) -> HtmlDocument:
        """Splice resolved paths around the host's own assets.

        Raises:
            RegistrationError: If registering any ``source_path`` failed. The
                asset lists are spliced regardless.
        """
        if self.should_skip(document.output_name):
            logger.debug("[html_tags] skipping %s", document.output_name)
            return document

        assets = document.assets
        outcomes: List[tuple] = []

        def get_path(tag: TagDescriptor) -> str:
            if tag.source_path is not None:
                outcomes.append((tag.source_path, self._register(document, tag.source_path)))
            return resolve_tag_path(tag, self.options, assets.public_path, build_hash)

        js_prepend = [get_path(tag) for tag in self.options.js_prepend]
        js_append = [get_path(tag) for tag in self.options.js_append]
        css_prepend = [get_path(tag) for tag in self.options.css_prepend]
        css_append = [get_path(tag) for tag in self.options.css_append]

        assets.js = js_prepend + list(assets.js) + js_append
        assets.css = css_prepend + list(assets.css) + css_append

        self._join(outcomes)
        return document

    def alter_tags(self, document: HtmlDocument) -> HtmlDocument:
        """Copy declared attributes onto the host's rendered link/script nodes.

        The nodes are matched by position: the first ``len(prepend)`` and the
        last ``len(append)`` link nodes, and the same for script nodes.
        """
        if self.should_skip(document.output_name):
            return document

        links = [node for node in document.head if node.name == "link"]
        scripts = [node for node in document.body if node.name == "script"]

        options = self.options
        self._copy_attributes(
            self._edges(links, len(options.css_prepend), len(options.css_append)),
            options.css_prepend + options.css_append,
        )
        self._copy_attributes(
            self._edges(scripts, len(options.js_prepend), len(options.js_append)),
            options.js_prepend + options.js_append,
        )
        return document

    @staticmethod
    def _edges(nodes: List[Any], prepend_count: int, append_count: int) -> List[Any]:
        return nodes[:prepend_count] + nodes[max(0, len(nodes) - append_count):]

    @staticmethod
    def _copy_attributes(nodes: List[Any], tags: Sequence[TagDescriptor]) -> None:
        for node, tag in zip(nodes, tags):
            for name, value in tag.attributes.items():
                node.attrs[name] = value

    @staticmethod
    def _register(document: HtmlDocument, source_path: str) -> Any:
        """Start one registration. A raised exception becomes a failed outcome."""
        if document.register_file is None:
            return RegistrationError(source_path, "the host does not support file registration")
        try:
            return document.register_file(source_path)
        except Exception as e:
            return e

    @staticmethod
    def _join(outcomes: List[tuple]) -> None:
        """Wait for every registration, then raise the first failure in declaration order."""
        pending = [outcome for _, outcome in outcomes if isinstance(outcome, Future)]
        if pending:
            wait(pending)
        for source_path, outcome in outcomes:
            error = outcome.exception() if isinstance(outcome, Future) else outcome
            if isinstance(error, RegistrationError):
                raise error
            if isinstance(error, BaseException):
                raise RegistrationError(source_path, str(error)) from error

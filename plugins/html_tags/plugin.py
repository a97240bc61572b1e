"""
An MkDocs plugin to inject extra <link> and <script> tags into every built page
"""

import hashlib
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from mkdocs.config import config_options as c
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.plugins import BasePlugin
from mkdocs.structure.files import Files
from mkdocs.structure.pages import Page

from plugins.html_tags.errors import RegistrationError
from plugins.html_tags.injector import DocumentAssets, HtmlDocument, TagsInjector
from plugins.html_tags.options import get_validated_options
from plugins.html_tags.tags import expand_glob

# Use MkDocs' recommended plugin logger namespace so debug logs appear only with `--verbose`.
logger = logging.getLogger(f"mkdocs.plugins.{__name__}")

# Length of the build hash handed to `hash`/`add_hash`.
BUILD_HASH_LENGTH = 20


class HtmlTagsPlugin(BasePlugin):
    """MkDocs plugin that injects configured CSS/JS tags around the theme's own assets.

    Configuration options (all optional):
    - tags (str|dict|list): Assets classified as CSS or JS by extension or explicit `type`.
    - links (str|dict|list): Assets that are always CSS.
    - scripts (str|dict|list): Assets that are always JS.
    - append (bool): Insert after (default) or before the theme's assets.
    - public_path (bool|str|callable) or use_public_path/add_public_path: Prefix paths with
      the page's relative root (or a fixed string).
    - hash (bool|str|callable) or use_hash/add_hash: Add the build hash for cache busting.
    - js_extensions / css_extensions (str|list): Extensions used to classify `tags`.
    - files (str|list): Glob patterns of output HTML files to inject into; all when unset.
    - html_plugin_name (str): Plugin that must be configured for injection to run.
    - debug (bool): Verbose per-page logging.
    """

    config_scheme = (
        ('append',           c.Type(bool)),
        ('public_path',      c.Type(object)),
        ('use_public_path',  c.Type(bool)),
        ('add_public_path',  c.Type(object)),
        ('hash',             c.Type(object)),
        ('use_hash',         c.Type(bool)),
        ('add_hash',         c.Type(object)),
        ('js_extensions',    c.Type((str, list))),
        ('css_extensions',   c.Type((str, list))),
        ('tags',             c.Type((str, dict, list))),
        ('links',            c.Type((str, dict, list))),
        ('scripts',          c.Type((str, dict, list))),
        ('files',            c.Type((str, list))),
        ('html_plugin_name', c.Type(str)),
        ('debug',            c.Type(bool, default=False)),
    )

    def __init__(self):
        super().__init__()
        self.injector: Optional[TagsInjector] = None
        self.build_hash: str = ""
        self._config_dir = Path(".")
        # source_path -> copied destination, reset on every build
        self._registered: Dict[str, str] = {}

    # -------------------------------
    # Helpers
    # -------------------------------

    def _dbg(self, msg: str, *args) -> None:
        """Debug log gated by the `debug` option."""
        if not self.config.get("debug", False):
            return
        logger.debug("[html_tags] " + msg, *args)

    def _glob(self, pattern: str, glob_path: str) -> List[str]:
        """Expand globs relative to the directory holding mkdocs.yml."""
        return expand_glob(pattern, str(self._config_dir / glob_path))

    def _register_file(self, source_path: str, config: MkDocsConfig) -> str:
        """Copy `source_path` into the site root under its basename, once per build."""
        if source_path in self._registered:
            return self._registered[source_path]
        src = self._config_dir / source_path
        dest = Path(config["site_dir"]) / os.path.basename(source_path)
        for other, taken in self._registered.items():
            if taken == dest.as_posix():
                raise RegistrationError(source_path, f"'{other}' is already copied to {taken}")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dest)
        except OSError as e:
            raise RegistrationError(source_path, str(e)) from e
        self._dbg("registered %s -> %s", src.as_posix(), dest.as_posix())
        self._registered[source_path] = dest.as_posix()
        return self._registered[source_path]

    @staticmethod
    def _render_tags(parent: Tag, existing: List[Tag], prepend: List[Tag], append: List[Tag]) -> None:
        """Place `prepend` before the first existing tag and `append` after the last one.

        `existing` is in document order and may span <head> and <body>; `parent`
        only receives the tags when there is nothing to anchor on.
        """
        if not existing:
            for node in prepend + append:
                parent.append(node)
            return
        for node in prepend:
            existing[0].insert_before(node)
        anchor = existing[-1]
        for node in append:
            anchor.insert_after(node)
            anchor = node

    @staticmethod
    def _render_attributes(nodes: List[Tag]) -> None:
        """Turn attribute values into HTML: True is a bare attribute, False removes it."""
        for node in nodes:
            for name, value in list(node.attrs.items()):
                if value is True:
                    node.attrs[name] = None
                elif value is False:
                    del node.attrs[name]
                elif isinstance(value, (int, float)):
                    node.attrs[name] = str(value)

    def _inject(self, output: str, output_name: str, public_path: str, config: MkDocsConfig) -> str:
        """Run both injection steps on one rendered HTML document."""
        if self.injector is None or self.injector.should_skip(output_name):
            self._dbg("skip %s", output_name)
            return output

        soup = BeautifulSoup(output, "html.parser")
        if soup.head is None or soup.body is None:
            self._dbg("no <head>/<body> in %s, nothing injected", output_name)
            return output

        existing_links = soup.head.find_all("link", rel="stylesheet")
        # Themes load scripts from <head> too (readthedocs), so look at the whole document
        existing_scripts = soup.find_all("script", src=True)

        document = HtmlDocument(
            output_name=output_name,
            assets=DocumentAssets(
                public_path=public_path,
                css=[link.get("href", "") for link in existing_links],
                js=[script["src"] for script in existing_scripts],
            ),
            register_file=lambda source_path: self._register_file(source_path, config),
        )

        try:
            self.injector.before_generation(document, self.build_hash)
        except RegistrationError as e:
            logger.error(str(e))
            return output

        options = self.injector.options
        css, js = document.assets.css, document.assets.js

        def links(paths: List[str]) -> List[Tag]:
            return [soup.new_tag("link", attrs={"rel": "stylesheet", "href": path}) for path in paths]

        def scripts(paths: List[str]) -> List[Tag]:
            return [soup.new_tag("script", attrs={"src": path}) for path in paths]

        css_prepend = links(css[:len(options.css_prepend)])
        css_append = links(css[len(css) - len(options.css_append):])
        js_prepend = scripts(js[:len(options.js_prepend)])
        js_append = scripts(js[len(js) - len(options.js_append):])

        self._render_tags(soup.head, existing_links, css_prepend, css_append)
        self._render_tags(soup.body, existing_scripts, js_prepend, js_append)

        document.head = soup.head.find_all("link", rel="stylesheet")
        document.body = soup.find_all("script", src=True)
        self.injector.alter_tags(document)
        self._render_attributes(css_prepend + css_append + js_prepend + js_append)

        self._dbg(
            "%s: css +%d/+%d js +%d/+%d",
            output_name, len(css_prepend), len(css_append), len(js_prepend), len(js_append),
        )
        return str(soup)

    # -------------------------------
    # MkDocs hooks
    # -------------------------------

    def on_config(self, config: MkDocsConfig) -> MkDocsConfig:
        """Validate options once; any ConfigurationError aborts the build here."""
        self._config_dir = Path(config.get("config_file_path") or "mkdocs.yml").parent
        raw: Dict[str, Any] = {
            key: value for key, value in self.config.items() if key != "debug" and value is not None
        }
        options = get_validated_options(raw, glob_func=self._glob)
        self.injector = TagsInjector(options)
        self.injector.apply(config["plugins"])

        extra = config["extra"]
        extra["externals"] = self.injector.register_externals(extra.get("externals"))

        logger.info(
            "[html_tags] %d link(s) and %d script(s) configured",
            len(options.links), len(options.scripts),
        )
        return config

    def on_pre_build(self, *, config: MkDocsConfig) -> None:
        self._registered = {}

    def on_files(self, files: Files, *, config: MkDocsConfig) -> Files:
        """Derive the build hash from every non-page file of the site."""
        digest = hashlib.sha384()
        for file in sorted(files.media_files(), key=lambda f: f.src_path):
            digest.update(file.src_path.replace("\\", "/").encode("utf8"))
            if file.abs_src_path and os.path.isfile(file.abs_src_path):
                digest.update(Path(file.abs_src_path).read_bytes())
        self.build_hash = digest.hexdigest()[:BUILD_HASH_LENGTH]
        self._dbg("build hash %s", self.build_hash)
        return files

    def on_post_page(self, output: str, *, page: Page, config: MkDocsConfig) -> Optional[str]:
        """Inject into a rendered Markdown page; paths are made relative to the site root."""
        dest = (getattr(page.file, "dest_uri", None) or page.file.dest_path).replace("\\", "/")
        depth = dest.count("/")
        public_path = "" if depth == 0 else "../" * depth
        return self._inject(output, dest, public_path, config)

    def on_post_template(self, output_content: str, *, template_name: str, config: MkDocsConfig) -> Optional[str]:
        """Inject into HTML theme templates (404.html, ...) using root-relative paths."""
        if not template_name.endswith(".html"):
            return output_content
        return self._inject(output_content, template_name, "/", config)

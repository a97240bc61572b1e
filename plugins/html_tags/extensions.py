"""
Classify asset paths as CSS or JS from their file extension.
"""

import re
from typing import Any, List, Mapping, Optional, Pattern

from plugins.html_tags.errors import ConfigurationError
from plugins.html_tags.predicates import ASSET_TYPE_CSS, ASSET_TYPE_JS, is_array, is_string

DEFAULT_EXTENSIONS = {
    "js_extensions": [".js"],
    "css_extensions": [".css"],
}


def get_extensions(options: Mapping[str, Any], option_name: str, option_path: str) -> List[str]:
    """Return the extension list configured under ``option_name``.

    A single string is accepted as a one-item list.
    """
    extensions = options.get(option_name)
    if extensions is None:
        return list(DEFAULT_EXTENSIONS[option_name])
    if is_string(extensions):
        return [extensions]
    if not is_array(extensions):
        raise ConfigurationError(
            f"{option_path}.{option_name} should be a string or array of strings ({extensions!r})"
        )
    for extension in extensions:
        if not is_string(extension):
            raise ConfigurationError(
                f"{option_path}.{option_name} array should only contain strings ({extension!r})"
            )
    return list(extensions)


def create_extensions_regex(extensions: List[str]) -> Pattern:
    """Compile one suffix matcher for the union of ``extensions``."""
    return re.compile(".*(" + "|".join(re.escape(ext) for ext in extensions) + ")$")


class ExtensionClassifier:
    """Decides whether a path is a stylesheet or a script."""

    def __init__(self, js_extensions: List[str], css_extensions: List[str]):
        self.js_extensions = list(js_extensions)
        self.css_extensions = list(css_extensions)
        self._js_re = create_extensions_regex(self.js_extensions)
        self._css_re = create_extensions_regex(self.css_extensions)

    @classmethod
    def from_options(cls, options: Mapping[str, Any], option_path: str) -> "ExtensionClassifier":
        return cls(
            get_extensions(options, "js_extensions", option_path),
            get_extensions(options, "css_extensions", option_path),
        )

    def is_css(self, path: str) -> bool:
        return bool(self._css_re.match(path))

    def is_js(self, path: str) -> bool:
        return bool(self._js_re.match(path))

    def classify(self, path: str) -> Optional[str]:
        """Return ``"css"``, ``"js"`` or ``None`` when neither list matches.

        CSS is checked first, so a path matching both lists is a stylesheet.
        """
        if self.is_css(path):
            return ASSET_TYPE_CSS
        if self.is_js(path):
            return ASSET_TYPE_JS
        return None

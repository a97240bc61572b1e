"""
Errors raised by the html_tags plugin.

All of them derive from MkDocs' ``PluginError`` so that a build aborted by a
bad configuration is reported as a clean error instead of a traceback.
"""

from mkdocs.exceptions import PluginError


class HtmlTagsError(PluginError):
    """Base class for every html_tags failure."""


class ConfigurationError(HtmlTagsError):
    """The plugin options are malformed. Raised before any document is built."""


class RegistrationError(HtmlTagsError):
    """A ``source_path`` file could not be registered as a build output."""

    def __init__(self, source_path: str, reason: str):
        self.source_path = source_path
        super().__init__(f"[html_tags] could not register source file '{source_path}': {reason}")


class HostIntegrationError(HtmlTagsError):
    """The HTML plugin this plugin cooperates with is not configured."""

from plugins.html_tags.options import ResolvedOptions
from plugins.html_tags.paths import resolve_tag_path, slash
from plugins.html_tags.tags import TagDescriptor


def prefix(path, base):
    return base + path


def query(path, build_hash):
    return path + "?" + build_hash


class TestResolveTagPath:
    """Composition of the public path and hash steps."""

    def test_public_path_then_hash(self):
        """Test: The public path step always runs before the hash step."""
        options = ResolvedOptions(use_public_path=False, add_public_path=prefix, add_hash=query)
        tag = TagDescriptor(path="a.js", public_path=True, hash=True)
        assert resolve_tag_path(tag, options, "/cdn/", "abc123") == "/cdn/a.js?abc123"

    def test_global_policy(self):
        options = ResolvedOptions(use_public_path=True, add_public_path=prefix, use_hash=True, add_hash=query)
        assert resolve_tag_path(TagDescriptor(path="a.js"), options, "/cdn/", "h") == "/cdn/a.js?h"

    def test_use_public_path_false_skips_step(self):
        """Test: A runtime public path is ignored when the global policy is off."""
        options = ResolvedOptions(use_public_path=False)
        assert resolve_tag_path(TagDescriptor(path="a.js"), options, "/cdn/", "h") == "a.js"

    def test_tag_false_overrides_global(self):
        options = ResolvedOptions(use_public_path=True, use_hash=True)
        tag = TagDescriptor(path="a.js", public_path=False, hash=False)
        assert resolve_tag_path(tag, options, "/cdn/", "h") == "a.js"

    def test_tag_function_overrides_global_transform(self):
        options = ResolvedOptions(use_public_path=True, add_public_path=prefix)
        tag = TagDescriptor(path="a.js", public_path=lambda path, base: "//static/" + path, hash=lambda p, h: p + "#" + h)
        assert resolve_tag_path(tag, options, "/cdn/", "h") == "//static/a.js#h"

    def test_default_transforms(self):
        options = ResolvedOptions(use_hash=True)
        assert resolve_tag_path(TagDescriptor(path="css/a.css"), options, "../", "abc") == "../css/a.css?abc"

    def test_separators_are_normalized(self):
        options = ResolvedOptions(use_public_path=False)
        assert resolve_tag_path(TagDescriptor(path="vendor\\a.js"), options, "", "") == "vendor/a.js"
        assert slash("a\\b\\c.css") == "a/b/c.css"

    def test_idempotent(self):
        """Test: Resolving twice gives the same string, transforms do not accumulate."""
        options = ResolvedOptions(add_public_path=prefix, use_hash=True, add_hash=query)
        tag = TagDescriptor(path="a.js")
        first = resolve_tag_path(tag, options, "/cdn/", "abc123")
        assert resolve_tag_path(tag, options, "/cdn/", "abc123") == first == "/cdn/a.js?abc123"

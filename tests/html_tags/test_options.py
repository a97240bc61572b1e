import pytest

from plugins.html_tags.errors import ConfigurationError
from plugins.html_tags.options import (
    ResolvedOptions,
    default_add_hash,
    default_add_public_path,
    get_validated_options,
    resolve_shortcuts,
)


def paths(tags):
    return [t.path for t in tags]


class TestBuckets:
    """Partitioning of declared tags into the four ordered buckets."""

    def test_defaults(self):
        options = get_validated_options({})
        assert options == ResolvedOptions()
        assert options.append is True
        assert options.use_public_path is True
        assert options.use_hash is False
        assert options.files is None

    def test_partition_is_stable(self):
        """Test: Every CSS tag lands in exactly one bucket, in declaration order."""
        options = get_validated_options(
            {
                "tags": [
                    "a.css",
                    {"path": "b.css", "append": False},
                    "c.js",
                    {"path": "d.css", "append": False},
                    {"path": "e.js", "append": False},
                    "f.css",
                ]
            }
        )
        assert paths(options.css_prepend) == ["b.css", "d.css"]
        assert paths(options.css_append) == ["a.css", "f.css"]
        assert paths(options.js_prepend) == ["e.js"]
        assert paths(options.js_append) == ["c.js"]
        assert len(options.css_prepend) + len(options.css_append) == len(options.links) == 4

    def test_tags_come_before_links_and_scripts(self):
        options = get_validated_options(
            {"tags": ["t.css", "t.js"], "links": ["l.css"], "scripts": ["s.js"]}
        )
        assert paths(options.links) == ["t.css", "l.css"]
        assert paths(options.scripts) == ["t.js", "s.js"]

    def test_append_default_is_inherited(self):
        """Test: Top level append=False moves tags without an explicit append to the prepend buckets."""
        options = get_validated_options(
            {"append": False, "links": ["a.css", {"path": "b.css", "append": True}]}
        )
        assert paths(options.css_prepend) == ["a.css"]
        assert paths(options.css_append) == ["b.css"]
        assert options.css_prepend[0].append is False

    def test_append_must_be_boolean(self):
        with pytest.raises(ConfigurationError, match=r"html_tags\.append"):
            get_validated_options({"append": "yes"})

    def test_links_and_scripts_are_bound_to_their_kind(self):
        """Test: links are CSS and scripts are JS whatever their extension."""
        options = get_validated_options({"links": ["fonts.php"], "scripts": ["loader.php"]})
        assert options.links[0].type == "css"
        assert options.scripts[0].type == "js"

    def test_links_reject_conflicting_type(self):
        with pytest.raises(ConfigurationError, match="always css"):
            get_validated_options({"links": [{"path": "a.js", "type": "js"}]})


class TestClassification:
    """Classification of entries of the tags option."""

    def test_explicit_type_overrides_extension(self):
        options = get_validated_options({"tags": [{"path": "a.mjs", "type": "js"}, {"path": "b.js", "type": "css"}]})
        assert paths(options.scripts) == ["a.mjs"]
        assert paths(options.links) == ["b.js"]

    def test_unknown_extension_fails(self):
        with pytest.raises(ConfigurationError, match=r"could not determine asset type for \('a\.mjs'\)"):
            get_validated_options({"tags": ["a.mjs"]})

    def test_custom_extensions(self):
        options = get_validated_options({"tags": ["a.mjs", "b.less"], "js_extensions": ".mjs", "css_extensions": [".less"]})
        assert paths(options.scripts) == ["a.mjs"]
        assert paths(options.links) == ["b.less"]


class TestShortcuts:
    """The public_path and hash option families."""

    def test_both_families_fail(self):
        """Test: public_path cannot be combined with use_public_path/add_public_path."""
        with pytest.raises(ConfigurationError, match="public_path should not be used with"):
            get_validated_options({"public_path": True, "use_public_path": True})
        with pytest.raises(ConfigurationError, match="hash should not be used with"):
            get_validated_options({"hash": True, "add_hash": default_add_hash})

    def test_use_public_path_false(self):
        options = get_validated_options({"use_public_path": False})
        assert options.use_public_path is False
        assert options.add_public_path is default_add_public_path

    def test_boolean_shortcut(self):
        options = get_validated_options({"hash": True})
        assert options.use_hash is True
        assert options.add_hash is default_add_hash

    def test_string_shortcut_replaces_runtime_value(self):
        """Test: A string shorthand is joined instead of the runtime public path."""
        options = get_validated_options({"public_path": "https://cdn.example.com/"})
        assert options.use_public_path is True
        assert options.add_public_path("a.js", "../") == "https://cdn.example.com/a.js"

        options = get_validated_options({"hash": "v2"})
        assert options.use_hash is True
        assert options.add_hash("a.js", "abc123") == "a.js?v2"

    def test_function_shortcut(self):
        def add(path, value):
            return value + path

        use, add_fn = resolve_shortcuts(
            {"public_path": add}, "html_tags", "public_path", "use_public_path", "add_public_path",
            True, default_add_public_path,
        )
        assert use is True
        assert add_fn is add

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError, match="use_hash should be a boolean"):
            get_validated_options({"use_hash": "yes"})
        with pytest.raises(ConfigurationError, match="add_public_path should be a function"):
            get_validated_options({"add_public_path": lambda p, b: None})
        with pytest.raises(ConfigurationError, match="public_path should be a boolean or a string"):
            get_validated_options({"public_path": 3})


class TestExternals:
    """The external property is only valid on scripts."""

    def test_external_on_links_fails(self):
        with pytest.raises(ConfigurationError, match=r"links\.external should not be used on non script tags"):
            get_validated_options(
                {"links": [{"path": "a.css", "external": {"package_name": "a", "variable_name": "A"}}]}
            )

    def test_external_on_css_tag_fails(self):
        with pytest.raises(ConfigurationError, match=r"tags\.external"):
            get_validated_options(
                {"tags": [{"path": "a.css", "external": {"package_name": "a", "variable_name": "A"}}]}
            )

    def test_external_on_scripts(self):
        options = get_validated_options(
            {"scripts": [{"path": "react.js", "external": {"package_name": "react", "variable_name": "React"}}]}
        )
        assert options.scripts[0].external.package_name == "react"


class TestMisc:
    def test_files_string_or_list(self):
        assert get_validated_options({"files": "index.html"}).files == ("index.html",)
        assert get_validated_options({"files": ["a.html", "b/*.html"]}).files == ("a.html", "b/*.html")
        with pytest.raises(ConfigurationError, match="files should be a string or array of strings"):
            get_validated_options({"files": ["a.html", 1]})

    def test_unknown_options(self):
        with pytest.raises(ConfigurationError, match="unknown options.*usePublicPath"):
            get_validated_options({"usePublicPath": True})

    def test_options_must_be_a_mapping(self):
        with pytest.raises(ConfigurationError, match="should be an object"):
            get_validated_options(["a.js"])

    def test_none_values_are_absent(self):
        assert get_validated_options({"append": None, "tags": None, "public_path": None}) == ResolvedOptions()

    def test_html_plugin_name(self):
        assert get_validated_options({"html_plugin_name": "search"}).html_plugin_name == "search"
        with pytest.raises(ConfigurationError, match="html_plugin_name"):
            get_validated_options({"html_plugin_name": 1})


class TestDefaultTransforms:
    def test_default_add_public_path(self):
        assert default_add_public_path("a.js", "") == "a.js"
        assert default_add_public_path("a.js", "../") == "../a.js"
        assert default_add_public_path("a.js", "/") == "/a.js"
        assert default_add_public_path("/a.js", "/cdn") == "/cdn/a.js"

    def test_default_add_hash(self):
        assert default_add_hash("a.js", "abc123") == "a.js?abc123"

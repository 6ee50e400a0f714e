import logging
import os
import threading
from pathlib import Path

import pytest

from sitesource import (
    ConfigurationError,
    ContentError,
    ContentIngestor,
    ContentRole,
    FilesystemAccessError,
    IngestionCancelled,
    load_content,
)

FIXTURE_ROOT = Path(__file__).parent / "fixtures"
PROJECT = FIXTURE_ROOT / "project"

SOURCE_ITEMS = {
    "about/index.html",
    "about/me/index.html",
    "index.html",
    "LICENSE",
    "pages/index.html",
    "projects/index.md",
    "robots.txt",
    "sitemap.xml",
}
POST_ITEMS = {
    "2013-08-12-post-example-1.md",
    "2013-08-12-post-example-2.mkd",
    "books/2013-08-11-best-book.md",
    "books/2013-09-19-new-book.md",
}


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


def _load_items(**options: object) -> dict:
    ingestor = ContentIngestor({"source_root": str(PROJECT), **options})
    ingestor.load()
    return dict(ingestor.get_items())


def test_loads_items_layouts_and_includes() -> None:
    ingestor = ContentIngestor(
        {
            "source_root": str(PROJECT),
            "layouts_root": str(PROJECT / "_layouts"),
            "includes_root": str(PROJECT / "_includes"),
            "posts_root": str(PROJECT / "_posts"),
        }
    )
    ingestor.load()

    items = ingestor.get_items()
    layouts = ingestor.get_layouts()
    includes = ingestor.get_includes()

    assert set(items) == SOURCE_ITEMS | POST_ITEMS
    assert set(layouts) == {"default.html"}
    assert set(includes) == {"test.html"}

    about = items["about/index.html"]
    assert about.attributes == {"layout": "default"}
    assert about.body == "<h1>About</h1>\n<p>This is the about page.</p>\n"
    assert about.raw_content.startswith("---\nlayout: default\n---\n")
    assert about.role is ContentRole.ITEM

    post = items["2013-08-12-post-example-1.md"]
    assert len(post.attributes) == 6
    assert post.body.startswith("Post example 1")
    assert not post.is_binary

    layout = layouts["default.html"]
    assert layout.role is ContentRole.LAYOUT
    assert layout.attributes == {"name": "default"}
    assert layout.body.startswith("<!DOCTYPE html>")

    include = includes["test.html"]
    assert include.role is ContentRole.INCLUDE
    assert include.attributes == {}
    assert include.body == include.raw_content
    assert include.raw_content.startswith("---\ntitle: Not parsed")


def test_only_source_root_skips_reserved_entries() -> None:
    items = _load_items()

    assert set(items) == SOURCE_ITEMS
    assert ".htaccess" not in items
    assert "config.yml" not in items
    assert "config_dev.yml" not in items
    assert "projects/index.meta.yml" not in items


def test_relative_roots_resolve_against_source_root() -> None:
    ingestor = ContentIngestor(
        {
            "source_root": str(PROJECT),
            "posts_root": "_posts",
            "layouts_root": "_layouts",
            "includes_root": "_includes",
        }
    )
    registry = ingestor.load()

    assert len(registry.items) == 12
    assert len(registry.layouts) == 1
    assert len(registry.includes) == 1


def test_relative_source_root_uses_base_dir() -> None:
    registry = load_content({"source_root": "project"}, base_dir=FIXTURE_ROOT)

    assert set(registry.items) == SOURCE_ITEMS
    assert registry.layouts == {}
    assert registry.includes == {}


def test_include_file_bypasses_builtin_exclusions() -> None:
    items = _load_items(include=[".htaccess"])

    assert len(items) == 9
    assert ".htaccess" in items


def test_include_reserved_config_file() -> None:
    items = _load_items(include=["config.yml"])

    assert set(items) == SOURCE_ITEMS | {"config.yml"}


def test_include_folder_adds_its_files() -> None:
    items = _load_items(include=["../extra_pages"])

    assert len(items) == 10
    assert items["extra-1.html"].attributes == {"title": "Extra page 1"}
    assert items["extra-2.html"].attributes == {}


def test_include_folder_respects_excludes() -> None:
    items = _load_items(include=["../extra_pages"], exclude=["extra-2.html"])

    assert set(items) == SOURCE_ITEMS | {"extra-1.html"}


def test_missing_include_entry_is_skipped() -> None:
    items = _load_items(include=["does-not-exist"])

    assert set(items) == SOURCE_ITEMS


def test_exclude_file() -> None:
    items = _load_items(exclude=["robots.txt"])

    assert len(items) == 7
    assert "robots.txt" not in items


def test_exclude_folder() -> None:
    items = _load_items(exclude=["about"])

    assert set(items) == SOURCE_ITEMS - {"about/index.html", "about/me/index.html"}


def test_exclude_glob_pattern() -> None:
    items = _load_items(exclude=["*.html"])

    assert set(items) == {"LICENSE", "projects/index.md", "robots.txt", "sitemap.xml"}


def test_sidecar_attributes_used_without_front_matter() -> None:
    items = _load_items()
    projects = items["projects/index.md"]

    assert projects.attributes == {"title": "Projects", "layout": "default"}
    assert projects.body == "# Projects\n\nA list of projects.\n"
    assert projects.body == projects.raw_content


def test_inline_front_matter_wins_over_sidecar(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write(site / "page.html", "---\ntitle: Inline\n---\nBody")
    _write(site / "page.meta.yml", "title: Sidecar\n")

    registry = load_content({"source_root": str(site)})

    assert registry.items["page.html"].attributes == {"title": "Inline"}
    assert registry.items["page.html"].body == "Body"


def test_files_without_extension_are_binary() -> None:
    items = _load_items()
    license_item = items["LICENSE"]

    assert license_item.is_binary
    assert license_item.raw_content == ""
    assert license_item.body == ""
    assert license_item.attributes == {}


def test_binary_files_skip_attribute_extraction(tmp_path: Path) -> None:
    site = tmp_path / "site"
    site.mkdir()
    (site / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    _write(site / "logo.meta.yml", "title: Logo\n")

    registry = load_content({"source_root": str(site)})
    logo = registry.items["logo.png"]

    assert logo.is_binary
    assert logo.attributes == {}
    assert logo.raw_content == ""
    assert logo.source_path == str(site / "logo.png")


def test_json_attribute_syntax(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write(site / "inline.html", '---\n{"title": "Inline", "order": 2}\n---\n<p>Inline</p>\n')
    _write(site / "sidecar.html", "<p>Sidecar</p>\n")
    _write(site / "sidecar.meta.json", '{"title": "Sidecar"}')
    _write(site / "other.meta.yml", "title: Not a sidecar here\n")

    registry = load_content({"source_root": str(site), "attribute_syntax": "json"})
    items = registry.items

    assert items["inline.html"].attributes == {"title": "Inline", "order": 2}
    assert items["inline.html"].body == "<p>Inline</p>\n"
    assert items["sidecar.html"].attributes == {"title": "Sidecar"}
    assert "sidecar.meta.json" not in items
    assert "other.meta.yml" in items


def test_crlf_line_endings_are_preserved(tmp_path: Path) -> None:
    site = tmp_path / "site"
    site.mkdir()
    (site / "page.md").write_bytes(b"---\r\ntitle: Windows\r\n---\r\nBody\r\n")

    registry = load_content({"source_root": str(site)})
    page = registry.items["page.md"]

    assert page.attributes == {"title": "Windows"}
    assert page.body == "Body\r\n"


def test_malformed_front_matter_raises_content_error(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write(site / "posts" / "bad.md", "---\ntitle: [unclosed\n---\nBody")

    with pytest.raises(ContentError) as excinfo:
        load_content({"source_root": str(site)})

    assert excinfo.value.id == "posts/bad.md"
    assert '"posts/bad.md"' in str(excinfo.value)


def test_leading_horizontal_rule_is_not_front_matter(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write(site / "page.md", "---\n\nJust a rule above.\n")

    page = load_content({"source_root": str(site)}).items["page.md"]

    assert page.attributes == {}
    assert page.body == "---\n\nJust a rule above.\n"


def test_malformed_sidecar_raises_content_error(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write(site / "page.html", "<p>Page</p>")
    _write(site / "page.meta.yml", "- just\n- a list\n")

    with pytest.raises(ContentError) as excinfo:
        load_content({"source_root": str(site)})

    assert excinfo.value.id == "page.html"


def test_non_utf8_text_loads_losslessly(tmp_path: Path) -> None:
    site = tmp_path / "site"
    _write(site / "index.html", "---\ntitle: Home\n---\nHi")
    original = "caf\xe9 notes\n".encode("latin-1")
    (site / "notes.txt").write_bytes(original)

    items = load_content({"source_root": str(site)}).items

    assert set(items) == {"index.html", "notes.txt"}
    notes = items["notes.txt"]
    assert not notes.is_binary
    assert notes.raw_content.encode("utf-8", "surrogateescape") == original
    assert notes.body == notes.raw_content


def test_attributes_are_read_only_after_load() -> None:
    registry = load_content({"source_root": str(PROJECT)})
    page = registry.items["about/index.html"]

    with pytest.raises(TypeError):
        page.attributes["layout"] = "changed"  # type: ignore[index]

    assert registry.items["about/index.html"].attributes["layout"] == "default"


def test_later_root_wins_on_duplicate_ids(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    site = tmp_path / "site"
    _write(site / "index.html", "root")
    _write(site / "_posts" / "index.html", "post")

    with caplog.at_level(logging.WARNING, logger="sitesource.registry"):
        registry = load_content({"source_root": str(site), "posts_root": "_posts"})

    assert registry.items["index.html"].raw_content == "post"
    assert "Duplicate item 'index.html'" in caplog.text


@pytest.mark.parametrize(
    ("options", "option"),
    [
        ({}, "source_root"),
        ({"source_root": []}, "source_root"),
        ({"source_root": 42}, "source_root"),
        ({"source_root": "site", "posts_root": []}, "posts_root"),
        ({"source_root": "site", "layouts_root": []}, "layouts_root"),
        ({"source_root": "site", "includes_root": {}}, "includes_root"),
        ({"source_root": "site", "include": "./"}, "include"),
        ({"source_root": "site", "include": ["ok", 3]}, "include"),
        ({"source_root": "site", "exclude": "./"}, "exclude"),
        ({"source_root": "site", "attribute_syntax": "toml"}, "attribute_syntax"),
    ],
)
def test_invalid_options_raise_configuration_error(options: dict, option: str) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ContentIngestor(options)

    assert excinfo.value.option == option
    assert option in str(excinfo.value)


def test_configuration_is_checked_before_filesystem(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(ConfigurationError):
        load_content({"source_root": str(missing), "exclude": "about"})


def test_missing_source_root_raises_filesystem_error(tmp_path: Path) -> None:
    missing = tmp_path / "missing"
    ingestor = ContentIngestor({"source_root": str(missing)})

    with pytest.raises(FilesystemAccessError) as excinfo:
        ingestor.load()

    assert excinfo.value.path == str(missing)


def test_missing_layouts_root_raises_filesystem_error() -> None:
    ingestor = ContentIngestor({"source_root": str(PROJECT), "layouts_root": "_missing"})

    with pytest.raises(FilesystemAccessError):
        ingestor.load()


def test_working_directory_is_untouched(tmp_path: Path) -> None:
    before = os.getcwd()
    load_content({"source_root": str(PROJECT), "layouts_root": "_layouts"})
    assert os.getcwd() == before

    _write(tmp_path / "site" / "bad.md", "---\ntitle: [unclosed\n---\n")
    with pytest.raises(ContentError):
        load_content({"source_root": str(tmp_path / "site")})
    assert os.getcwd() == before


def test_results_unavailable_before_load() -> None:
    ingestor = ContentIngestor({"source_root": str(PROJECT)})

    with pytest.raises(RuntimeError):
        ingestor.get_items()


def test_each_load_builds_a_fresh_sealed_registry() -> None:
    ingestor = ContentIngestor({"source_root": str(PROJECT)})
    first = ingestor.load()
    second = ingestor.load()

    assert first is not second
    assert first.sealed and second.sealed
    assert set(first.items) == set(second.items)
    with pytest.raises(RuntimeError):
        first.insert(second.items["index.html"])


def test_cancelled_load_raises_and_keeps_previous_registry() -> None:
    ingestor = ContentIngestor({"source_root": str(PROJECT)})
    previous = ingestor.load()
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(IngestionCancelled):
        ingestor.load(cancel=cancel)

    assert ingestor.registry is previous

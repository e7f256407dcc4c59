import json

import pytest

from services.theme_library import ThemeLibrary, ThemeLibraryError, extract_workshop_id


def test_discover_sorted_with_fallbacks(library):
    themes = library.discover()
    assert list(themes) == ["broken", "described", "neon", "plain"]
    assert themes["plain"].manifest == {"meta": {"name": "plain"}}
    assert themes["plain"].subs == []


def test_discover_uses_first_sub_manifest_as_representative(library):
    neon = library.discover()["neon"]
    assert neon.representative_sub == "dark"
    assert neon.display_name == "Neon Dark"
    assert [s.name for s in neon.subs] == ["dark", "light"]


def test_discover_shapes_meta_json(library):
    described = library.discover()["described"]
    assert described.manifest == {
        "meta": {
            "name": "Described",
            "tags": ["x"],
            "short-description": "Short",
            "description": "Short",
            "long-description": "Long",
        }
    }


def test_discover_records_manifest_error(library):
    broken = library.discover()["broken"]
    assert broken.error and broken.error.startswith("manifest parse error")
    assert broken.subs == []


def test_sub_theme_details(library):
    neon = library.discover()["neon"]
    dark = neon.find_sub("dark")
    assert dark is not None
    assert dark.display_name == "Neon Dark"
    assert dark.wallpaper_preview and dark.wallpaper_preview.endswith("wallpaper.png")
    assert neon.find_sub("light").wallpaper_preview is None
    assert neon.find_sub("missing") is None


def test_legacy_themes_included(theme_tree):
    legacy = theme_tree["root"] / "themes"
    (legacy / "old").mkdir(parents=True)
    (legacy / "old" / "manifest.json").write_text(json.dumps({"meta": {"name": "Old"}}), encoding="utf-8")
    (legacy / "no-manifest").mkdir()
    lib = ThemeLibrary(theme_tree["themes"], legacy_dir=legacy)
    themes = lib.discover()
    assert themes["old"].display_name == "Old"
    assert "no-manifest" not in themes


def test_missing_themes_dir_discovers_nothing(tmp_path):
    assert ThemeLibrary(tmp_path / "nope").discover() == {}


def test_list_subs(library):
    assert library.list_subs("neon") == ["dark", "light"]
    assert library.list_subs("plain") == []


def test_read_and_write_theme_file(library, sample_config):
    assert library.read_theme_file("neon") == sample_config
    assert library.read_theme_file("plain") is None
    path = library.write_theme_file("plain", "bars:\r\n")
    assert path.read_bytes() == b"bars:\r\n"
    assert library.read_theme_file("plain") == "bars:\r\n"


def test_write_failure_raises(library, theme_tree):
    (theme_tree["themes"] / "plain" / "config.yaml").mkdir()
    with pytest.raises(ThemeLibraryError):
        library.write_theme_file("plain", "x")


@pytest.mark.parametrize("name", ["..", "a/b", "a\\b", ""])
def test_path_segments_validated(library, name):
    with pytest.raises(ThemeLibraryError):
        library.read_theme_file(name)


def test_sub_manifest_read_write(library):
    data = library.read_sub_manifest("neon", "dark")
    assert data["meta"]["name"] == "Neon Dark"
    data["meta"]["version"] = "2.0.0"
    path = library.write_sub_manifest("neon", "dark", data)
    assert json.loads(path.read_text(encoding="utf-8"))["meta"]["version"] == "2.0.0"
    assert path.read_text(encoding="utf-8").startswith('{\n  "meta"')


def test_sub_manifest_missing_raises_and_corrupt_is_empty(library, theme_tree):
    with pytest.raises(ThemeLibraryError):
        library.read_sub_manifest("neon", "nope")
    (theme_tree["themes"] / "neon" / "sub-themes" / "light" / "manifest.json").write_text(
        "{oops", encoding="utf-8"
    )
    assert library.read_sub_manifest("neon", "light") == {}


def test_disable_and_enable_wallpaper(library, theme_tree):
    manifest_path = library.manifest_path("neon", "dark")
    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    data["skip-provided-wallpaper"] = True
    manifest_path.write_text(json.dumps(data), encoding="utf-8")

    library.disable_sub_wallpaper("neon", "dark")
    data = library.read_sub_manifest("neon", "dark")
    assert data["wallpaper-engine"]["enabled"] is False
    assert "skip-provided-wallpaper" not in data

    skip = theme_tree["user_state"] / "neon---dark---skip-workshop.txt"
    skip.write_text("1", encoding="utf-8")
    library.enable_sub_wallpaper("neon", "dark")
    data = library.read_sub_manifest("neon", "dark")
    assert data["wallpaper-engine"]["enabled"] is True
    assert data["wallpaper-engine"]["link"].endswith("id=123456")
    assert not skip.exists()


def test_enable_wallpaper_creates_engine_section(library):
    library.enable_sub_wallpaper("neon", "light")
    assert library.read_sub_manifest("neon", "light")["wallpaper-engine"] == {"enabled": True}


@pytest.mark.parametrize(
    "link,expected",
    [
        ("https://steamcommunity.com/sharedfiles/filedetails/?id=123456", "123456"),
        ("https://example.com/?a=1&id=42&b=2", "42"),
        ("https://example.com/", None),
        ("", None),
    ],
)
def test_extract_workshop_id(link, expected):
    assert extract_workshop_id(link) == expected

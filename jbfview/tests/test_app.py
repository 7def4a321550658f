"""Tests for the command line flow."""

from pathlib import Path
from unittest.mock import patch

import pytest

from jbfview import app
from jbfview.config import AppConfig
from jbfview.errors import ArgumentError, CorruptError
from jbfview.models import Catalog


@pytest.fixture(autouse=True)
def isolated_app(tmp_path, monkeypatch):
    """Fresh config in a temp app data dir, no log files, cwd in a work dir."""
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.setattr(app, "config", AppConfig())
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    with patch.object(app, "setup_logging"):
        yield workdir


@pytest.fixture
def photo_catalog(catalog_file, entry_factory, jpeg_bytes):
    return catalog_file(
        [
            entry_factory("IMG_0001.JPG", thumbnail=jpeg_bytes),
            entry_factory("P1010001.ORF", file_type_code=0x00),
            entry_factory("IMG_0002.JPG", thumbnail=jpeg_bytes),
        ],
        name="photos/pspbrwse.jbf",
    )


def test_candidate_paths():
    """Test that the catalog is looked up as a file, in a directory, then in the cwd."""
    assert app.candidate_paths("", "pspbrwse.jbf") == [Path("pspbrwse.jbf")]
    assert app.candidate_paths("photos", "pspbrwse.jbf") == [
        Path("photos"),
        Path("photos") / "pspbrwse.jbf",
        Path("pspbrwse.jbf"),
    ]


def test_find_catalog_by_file(photo_catalog):
    """Test that a path naming the catalog itself opens it."""
    catalog = app.find_catalog(str(photo_catalog))
    assert isinstance(catalog, Catalog)
    assert len(catalog) == 3


def test_find_catalog_by_directory(photo_catalog):
    """Test that a directory is searched for the catalog file."""
    catalog = app.find_catalog(str(photo_catalog.parent))
    assert catalog.path == photo_catalog.parent / "pspbrwse.jbf"


def test_find_catalog_falls_back_to_cwd(isolated_app, catalog_builder, entry_factory):
    """Test that the current directory is tried when the argument fails."""
    (isolated_app / "pspbrwse.jbf").write_bytes(catalog_builder([entry_factory("a.raw")]))
    catalog = app.find_catalog("does-not-exist")
    assert len(catalog) == 1


def test_find_catalog_reports_last_error(tmp_path):
    """Test that the last candidate's error is raised when nothing opens."""
    with pytest.raises(ArgumentError):
        app.find_catalog(str(tmp_path / "missing"))


def test_find_catalog_corrupt(isolated_app):
    """Test that a corrupt catalog surfaces as CorruptError."""
    (isolated_app / "pspbrwse.jbf").write_bytes(b"\x00" * 2048)
    with pytest.raises(CorruptError):
        app.find_catalog()


def test_main_writes_default_output(isolated_app, photo_catalog):
    """Test that index.html is written with entries that have thumbnails."""
    assert app.main(str(photo_catalog.parent)) == 0

    page = (isolated_app / "index.html").read_text(encoding="utf-8")
    assert page.count('<div class="object">') == 2
    assert "P1010001.ORF" not in page


def test_main_refuses_to_overwrite_default_output(isolated_app, photo_catalog):
    """Test that an existing default output is left alone."""
    (isolated_app / "index.html").write_text("keep me")

    assert app.main(str(photo_catalog)) == 1
    assert (isolated_app / "index.html").read_text() == "keep me"


def test_main_explicit_output_overwrites(isolated_app, photo_catalog):
    """Test that an explicit output file is overwritten."""
    target = isolated_app / "out.html"
    target.write_text("old")

    assert app.main(str(photo_catalog), output=str(target)) == 0
    assert "IMG_0001.JPG" in target.read_text(encoding="utf-8")


def test_main_include_empty(isolated_app, photo_catalog):
    """Test that entries without thumbnails are listed on request."""
    assert app.main(str(photo_catalog), include_empty=True) == 0
    assert "P1010001.ORF" in (isolated_app / "index.html").read_text(encoding="utf-8")


def test_main_include_empty_from_config(isolated_app, photo_catalog):
    """Test that the config decides about empty thumbnails when no flag is given."""
    app.config.set("html", "skip_empty_thumbnails", False)
    assert app.main(str(photo_catalog)) == 0
    assert "P1010001.ORF" in (isolated_app / "index.html").read_text(encoding="utf-8")


def test_main_without_catalog(isolated_app):
    """Test that a missing catalog exits with status 1 and writes nothing."""
    assert app.main("nowhere") == 1
    assert not (isolated_app / "index.html").exists()


def test_main_output_directory_missing(isolated_app, photo_catalog):
    """Test that an unwritable output path exits with status 1."""
    assert app.main(str(photo_catalog), output=str(isolated_app / "no" / "such" / "dir.html")) == 1


def test_verify_drops_broken_thumbnails(isolated_app, catalog_file, entry_factory, jpeg_bytes):
    """Test that verification leaves undecodable thumbnails out of the page."""
    path = catalog_file([
        entry_factory("good.jpg", thumbnail=jpeg_bytes),
        entry_factory("broken.jpg", thumbnail=b"\xff\xd8\x00\x00\x00\x00"),
    ])

    assert app.main(str(path), verify=True) == 0
    page = (isolated_app / "index.html").read_text(encoding="utf-8")
    assert "good.jpg" in page
    assert "broken.jpg" not in page


def test_without_verify_broken_thumbnails_are_kept(isolated_app, catalog_file, entry_factory, jpeg_bytes):
    """Test that thumbnails are embedded unchecked without verification."""
    path = catalog_file([entry_factory("broken.jpg", thumbnail=b"\xff\xd8\x00\x00\x00\x00")])

    assert app.main(str(path)) == 0
    assert "broken.jpg" in (isolated_app / "index.html").read_text(encoding="utf-8")


def test_main_starts_watch(isolated_app, photo_catalog):
    """Test that watch mode starts after the first page is written."""
    with patch.object(app, "watch") as watch:
        assert app.main(str(photo_catalog), watch_catalog=True) == 0
    watch.assert_called_once_with(photo_catalog, Path("index.html"), False, False)


@pytest.mark.parametrize("output", [".", "sub"])
def test_main_output_is_a_directory(isolated_app, photo_catalog, capsys, output):
    """Test that a directory given as output exits with status 1."""
    (isolated_app / "sub").mkdir()

    assert app.main(str(photo_catalog), output=output) == 1
    assert "can not open" in capsys.readouterr().err


def test_watch_uses_configured_interval(isolated_app, photo_catalog):
    """Test that watch mode sleeps for the configured interval and stops its watcher."""
    app.config.set("core", "watch_interval", 0.25)

    with patch.object(app, "Watcher") as watcher_cls, \
            patch.object(app.time, "sleep", side_effect=KeyboardInterrupt) as sleep:
        app.watch(photo_catalog, Path("index.html"), False, False)

    sleep.assert_called_once_with(0.25)
    watcher_cls.assert_called_once()
    watcher_cls.return_value.start.assert_called_once_with()
    watcher_cls.return_value.stop.assert_called_once_with()

import sys
import textwrap

import pytest
from click.testing import CliRunner

from mailgallery import GallerySnapshot
from mailgallery.cli import cli
from mailgallery.errors import GalleryLoadError
from mailgallery.loader import load_gallery

GALLERY_MODULE = textwrap.dedent(
    """
    from mailgallery import Email, Gallery


    class HelloEmail:
        @staticmethod
        def preview():
            return Email(subject="Hello", html_body="<p>Hello</p>")

        @staticmethod
        def preview_details():
            return {"title": "Hello"}


    gallery = Gallery()
    with gallery.group("/greetings", title="Greetings"):
        gallery.preview("/hello", HelloEmail)

    snapshot = gallery.freeze()


    def factory():
        return snapshot

    not_a_gallery = 42
    """
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))
    name = f"gallery_{tmp_path.name.replace('-', '_')}"
    (tmp_path / f"{name}.py").write_text(GALLERY_MODULE, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    yield tmp_path, name
    sys.modules.pop(name, None)


def test_load_gallery_variants(project):
    root, name = project
    snapshot = load_gallery(name, search_path=root)
    assert isinstance(snapshot, GallerySnapshot)
    assert [p.path for p in snapshot.previews] == ["greetings.hello"]
    assert load_gallery(f"{name}:snapshot") is snapshot
    assert load_gallery(f"{name}:factory") is snapshot


def test_load_gallery_errors(project):
    root, name = project
    with pytest.raises(GalleryLoadError, match="Cannot import"):
        load_gallery("no_such_gallery_module", search_path=root)
    with pytest.raises(GalleryLoadError, match="no attribute"):
        load_gallery(f"{name}:missing", search_path=root)
    with pytest.raises(GalleryLoadError, match="not a Gallery"):
        load_gallery(f"{name}:not_a_gallery", search_path=root)
    with pytest.raises(GalleryLoadError, match="Invalid"):
        load_gallery(":gallery")


def test_cli_build(project):
    root, name = project
    runner = CliRunner()
    result = runner.invoke(cli, ["build", "--gallery", name, "--path", "site"])
    assert result.exit_code == 0, result.output
    assert "Built 1 previews" in result.output
    assert (root / "site" / "index.html").exists()
    assert (root / "site" / "greetings.hello" / "preview.html").read_text(
        encoding="utf-8"
    ) == "<p>Hello</p>"


def test_cli_build_reads_config(project):
    root, name = project
    (root / "mailgallery.yaml").write_text(
        f"gallery: {name}:gallery\noutput_dir: public\nbase_path: /emails\n", encoding="utf-8"
    )
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 0, result.output
    index = (root / "public" / "index.html").read_text(encoding="utf-8")
    assert 'href="/emails/greetings.hello/"' in index


def test_cli_requires_gallery(project):
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code != 0
    assert "No gallery given" in result.output


def test_cli_reports_load_errors(project):
    result = CliRunner().invoke(cli, ["build", "--gallery", "no_such_gallery_module"])
    assert result.exit_code != 0
    assert "Cannot import" in result.output


def test_cli_reports_build_errors(project, monkeypatch):
    root, name = project
    from mailgallery.build import BuildError

    def fake_build_gallery(gallery, output_dir, base_path="", clean_output=True):
        raise BuildError("greetings.hello", "ValueError: bad fixture")

    monkeypatch.setattr("mailgallery.build.build_gallery", fake_build_gallery)
    result = CliRunner().invoke(cli, ["build", "--gallery", name])
    assert result.exit_code == 1
    assert "Build failed" in result.output
    assert "greetings.hello" in result.output


def test_cli_serve(project, monkeypatch):
    root, name = project
    called = {}

    class DummyServer:
        def __init__(self, gallery, port=4000, base_path="", host="127.0.0.1"):
            called["previews"] = len(gallery.previews)
            called["port"] = port
            called["base_path"] = base_path
            called["host"] = host

        def start(self):
            called["started"] = True

    monkeypatch.setattr("mailgallery.server.GalleryServer", DummyServer)
    result = CliRunner().invoke(
        cli, ["-v", "serve", "--gallery", name, "--port", "5050"], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert called == {
        "previews": 1,
        "port": 5050,
        "base_path": "",
        "host": "127.0.0.1",
        "started": True,
    }


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "mailgallery" in result.output

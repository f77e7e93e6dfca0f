import json

import pytest

from blogcore.cli import EXIT_NOT_FOUND, EXIT_UNAVAILABLE, main


@pytest.fixture
def site(tmp_path):
    posts = tmp_path / "posts"
    posts.mkdir()
    (posts / "hello.md").write_text(
        "---\ntitle: Hello\ndescription: First post\ndate: 2014-03-01\n---\n# Hi\n\nSome *text*.",
        encoding="utf-8",
    )
    config = tmp_path / "site.json"
    config.write_text(
        json.dumps({"site_name": "Test Blog", "database": "blog.db", "posts": "posts", "output": "dist"}),
        encoding="utf-8",
    )
    return tmp_path, config


def test_import_then_render(site, capsys):
    root, config = site
    assert main(["--config", str(config), "import"]) == 0
    assert (root / "blog.db").exists()
    capsys.readouterr()

    assert main(["--config", str(config), "render", "/entry/hello"]) == 0
    out = capsys.readouterr().out
    assert "<title>Hello | Test Blog</title>" in out
    assert "<h1>Hi</h1>" in out
    assert "<em>text</em>" in out


def test_render_missing_entry(site, capsys):
    root, config = site
    main(["--config", str(config), "import"])
    assert main(["--config", str(config), "render", "/entry/999"]) == EXIT_NOT_FOUND
    assert "Not found" in capsys.readouterr().err


def test_render_about(site, capsys):
    _, config = site
    assert main(["--config", str(config), "render", "/about"]) == 0
    assert "About" in capsys.readouterr().out


def test_render_without_database_is_unavailable(site, capsys):
    _, config = site
    assert main(["--config", str(config), "render", "/entry/1"]) == EXIT_UNAVAILABLE
    assert "unavailable" in capsys.readouterr().err


def test_build_from_posts(site):
    root, config = site
    assert main(["--config", str(config), "build", "--posts", str(root / "posts"), "--build-workers", "2"]) == 0
    dist = root / "dist"
    assert "<h1>Hi</h1>" in (dist / "entry" / "hello.html").read_text(encoding="utf-8")
    assert (dist / "about.html").exists()
    assert (dist / "404.html").exists()
    assert ".codehilite" in (dist / "highlight.css").read_text(encoding="utf-8")

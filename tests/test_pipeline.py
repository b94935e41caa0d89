"""End-to-end tests for the two-phase resource pipeline."""

import hashlib
import logging
import re
import time
from pathlib import Path

import pytest

from resmin.config import MinifyConfig
from resmin.errors import ConfigurationError, MinificationError
from resmin.minifiers import Minifiers, default_minifiers, identity
from resmin.pipeline import ResourcePipeline, run_pipeline

from conftest import upper, write_tree


def md5(content: bytes) -> str:
    return hashlib.md5(content).hexdigest()


def output_files(root: Path):
    return sorted(path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file())


def test_single_css(source_dir, target_dir, make_config, fake_minifiers):
    write_tree(source_dir, {"app.css": "body { color: red; }"})

    result = run_pipeline(make_config(), fake_minifiers)

    [name] = output_files(target_dir)
    assert re.fullmatch(r"app-[0-9a-f]{6}\.min\.css", name)
    assert name == f"app-{md5(b'body { color: red; }')[:6]}.min.css"
    assert dict(result.registry) == {"app.css": name}
    assert result.assets == [target_dir / name]


def test_html_references_are_rewritten(source_dir, target_dir, make_config, fake_minifiers):
    write_tree(
        source_dir,
        {
            "a.css": "a{}",
            "b.js": "var b;",
            "index.html": '<link href="a.css"><script src="b.js">',
        },
    )

    result = run_pipeline(make_config(), fake_minifiers)

    html = (target_dir / "index.html").read_text()
    css_name = result.registry["a.css"]
    js_name = result.registry["b.js"]
    assert "a.css" not in html
    assert "b.js" not in html
    assert html.count(css_name) == 1
    assert html.count(js_name) == 1
    assert result.pages == [target_dir / "index.html"]


def test_exclusion(source_dir, target_dir, make_config, fake_minifiers, caplog):
    caplog.set_level(logging.INFO, logger="resmin")
    write_tree(source_dir, {"keep.js": "keep()", "other.js": "other()"})

    result = run_pipeline(make_config(exclude_resources=frozenset({"keep.js"})), fake_minifiers)

    [name] = output_files(target_dir)
    assert name.startswith("other-")
    assert "keep.js" not in result.registry
    assert result.skipped == 1
    assert "Skip resource: keep.js" in caplog.messages


def test_full_hash_pattern(source_dir, target_dir, make_config, fake_minifiers):
    write_tree(source_dir, {"x.css": "x{}"})

    run_pipeline(make_config(filename_pattern="[name].[hash].min.[ext]"), fake_minifiers)

    assert output_files(target_dir) == [f"x.{md5(b'x{}')}.min.css"]


def test_nested_directories(source_dir, target_dir, make_config, fake_minifiers):
    write_tree(source_dir, {"sub/dir/style.css": "p{}", "sub/page.html": "<p>"})

    run_pipeline(make_config(), fake_minifiers)

    files = output_files(target_dir)
    assert f"sub/dir/style-{md5(b'p{}')[:6]}.min.css" in files
    assert "sub/page.html" in files


def test_other_files_produce_no_output(source_dir, target_dir, make_config, fake_minifiers):
    write_tree(source_dir, {"logo.png": b"\x89PNG", "notes.txt": "hi", "a.js": "a"})

    result = run_pipeline(make_config(), fake_minifiers)

    assert output_files(target_dir) == [f"a-{md5(b'a')[:6]}.min.js"]
    assert result.ignored == 2


def test_minified_bytes_are_hashed_and_written(source_dir, target_dir, make_config):
    minifiers = Minifiers(css=upper, js=upper, html=upper)
    write_tree(source_dir, {"a.css": "a{}", "index.html": '<link href="a.css">'})

    result = run_pipeline(make_config(), minifiers)

    minted = result.registry["a.css"]
    assert minted == f"a-{md5(b'A{}')[:6]}.min.css"
    assert (target_dir / minted).read_bytes() == b"A{}"
    # rewriting runs on the minified page, where the reference became A.CSS
    assert (target_dir / "index.html").read_text() == '<LINK HREF="A.CSS">'


def test_every_asset_registered_before_any_page(source_dir, make_config):
    write_tree(
        source_dir,
        {
            "0-first.html": "<p>",
            "a.css": "a",
            "m/b.js": "b",
            "z.css": "z",
            "zz.html": "<p>",
        },
    )
    events = []
    pipeline = None

    def leaf(content):
        events.append(("leaf", content))
        return content

    def page(content):
        events.append(("page", pipeline.registry.sealed, len(pipeline.registry)))
        return content

    pipeline = ResourcePipeline(make_config(), Minifiers(css=leaf, js=leaf, html=page))
    pipeline.run()

    kinds = [event[0] for event in events]
    assert kinds == ["leaf", "leaf", "leaf", "page", "page"]
    assert all(event[1:] == (True, 3) for event in events if event[0] == "page")


def test_duplicate_basenames_last_wins(source_dir, target_dir, make_config, fake_minifiers, caplog):
    caplog.set_level(logging.WARNING, logger="resmin")
    write_tree(source_dir, {"one/app.js": "1", "two/app.js": "2"})

    result = run_pipeline(make_config(), fake_minifiers)

    assert result.registry["app.js"] == f"app-{md5(b'2')[:6]}.min.js"
    assert len(output_files(target_dir)) == 2
    assert any("Duplicate resource name app.js" in message for message in caplog.messages)


def test_minifier_failure_is_fatal_and_keeps_partial_output(source_dir, target_dir, make_config):
    def broken(content):
        raise ValueError("unexpected token")

    write_tree(source_dir, {"a.css": "a", "b.js": "b", "index.html": "<p>"})

    with pytest.raises(MinificationError) as excinfo:
        run_pipeline(make_config(), Minifiers(css=identity, js=broken, html=identity))

    assert "b.js" in str(excinfo.value)
    assert excinfo.value.path == source_dir / "b.js"
    assert output_files(target_dir) == [f"a-{md5(b'a')[:6]}.min.css"]


def test_invalid_pattern_rejected(make_config):
    with pytest.raises(ConfigurationError):
        make_config(filename_pattern="[name]-[hash:0].[ext]")


def test_parallel_run_matches_sequential(tmp_path, source_dir, make_config, fake_minifiers):
    files = {f"d{i}/f{i}.css": f".c{i}{{}}" for i in range(12)}
    files.update({f"s{i}.js": f"var s{i};" for i in range(12)})
    files["index.html"] = "".join(f'<script src="s{i}.js"></script>' for i in range(12))
    write_tree(source_dir, files)

    sequential = run_pipeline(make_config(), fake_minifiers)
    parallel_target = tmp_path / "parallel"
    parallel = run_pipeline(
        MinifyConfig(source_directory=source_dir, target_directory=parallel_target, workers=4),
        fake_minifiers,
    )

    assert dict(parallel.registry) == dict(sequential.registry)
    assert output_files(parallel_target) == output_files(make_config().target_directory)
    assert (parallel_target / "index.html").read_text() == (
        make_config().target_directory / "index.html"
    ).read_text()


def test_parallel_duplicate_basenames_follow_scan_order(tmp_path, source_dir, make_config):
    def slow_first(content):
        if content == b"1":
            time.sleep(0.3)
        return content

    write_tree(
        source_dir,
        {"one/app.js": "1", "two/app.js": "2", "index.html": '<script src="app.js">'},
    )
    minifiers = Minifiers(css=slow_first, js=slow_first, html=identity)
    parallel_target = tmp_path / "parallel"

    result = run_pipeline(
        MinifyConfig(source_directory=source_dir, target_directory=parallel_target, workers=2),
        minifiers,
    )

    expected = f"app-{md5(b'2')[:6]}.min.js"
    assert result.registry["app.js"] == expected
    assert (parallel_target / "index.html").read_text() == f'<script src="{expected}">'
    assert len(result.assets) == 2


def test_html_that_is_not_utf8_after_minify(source_dir, make_config, fake_minifiers):
    write_tree(source_dir, {"index.html": b"<p>\xff</p>"})

    with pytest.raises(MinificationError) as excinfo:
        run_pipeline(make_config(), fake_minifiers)

    assert "not valid UTF-8" in str(excinfo.value)
    assert excinfo.value.path == source_dir / "index.html"
    assert excinfo.value.kind == "HTML"


def test_default_minifiers(source_dir, target_dir, make_config):
    css = "/* header */\nbody {\n    color: red;\n}\n"
    js = "// comment\nvar answer = 42;\n"
    html = '<html>\n  <head>\n    <link rel="stylesheet" href="app.css">\n  </head>\n  <body>\n    <script src="app.js"></script>\n  </body>\n</html>\n'
    write_tree(source_dir, {"app.css": css, "app.js": js, "index.html": html})

    result = run_pipeline(make_config(), default_minifiers())

    css_out = (target_dir / result.registry["app.css"]).read_text()
    js_out = (target_dir / result.registry["app.js"]).read_text()
    html_out = (target_dir / "index.html").read_text()
    assert "header" not in css_out and "color:red" in css_out
    assert "comment" not in js_out and "answer=42" in js_out
    assert len(html_out) < len(html)
    assert result.registry["app.css"] in html_out
    assert result.registry["app.js"] in html_out

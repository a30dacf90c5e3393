import pytest

import make_gallery
from imagegallery.render import DEFAULT_TITLE


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def run_cli(argv):
    with pytest.raises(SystemExit) as excinfo:
        make_gallery.main(argv)
    return excinfo.value.code


def test_default_arguments():
    args = make_gallery.get_parser().parse_args(["photos"])
    assert args.source_dir == "photos"
    assert args.title == DEFAULT_TITLE
    assert args.output_dir == "gallery"
    assert args.width == 320
    assert args.external is False
    assert args.workers == 1


def test_title_and_external_flag():
    args = make_gallery.get_parser().parse_args(["photos", "Holiday 2024", "--external-thumbs"])
    assert args.title == "Holiday 2024"
    assert args.external is True


def test_missing_source_argument_is_usage_error(capsys):
    assert run_cli([]) == 2
    assert "usage" in capsys.readouterr().err


@pytest.mark.parametrize("option", [["--width", "0"], ["--quality", "101"], ["--workers", "0"]])
def test_invalid_options_rejected(option):
    assert run_cli(["photos"] + option) == 2


def test_missing_source_directory(workdir, capsys):
    assert run_cli([str(workdir / "nope")]) == 2
    assert "not a directory" in capsys.readouterr().err
    assert not (workdir / "gallery").exists()


def test_no_supported_images(workdir, capsys):
    (workdir / "empty").mkdir()
    assert run_cli([str(workdir / "empty")]) == 0
    assert "No supported images" in capsys.readouterr().out
    assert not (workdir / "gallery").exists()


def test_builds_gallery(workdir, make_image, capsys):
    make_image(workdir / "photos" / "A.png", (400, 200))

    assert run_cli([str(workdir / "photos"), "Cats & Dogs"]) == 0
    out = capsys.readouterr().out
    assert "Gallery generated in:" in out
    page = (workdir / "gallery" / "index.html").read_text(encoding="utf-8")
    assert "<h1>Cats &amp; Dogs</h1>" in page


def test_custom_output_dir(workdir, make_image):
    make_image(workdir / "photos" / "A.png", (400, 200))

    assert run_cli([str(workdir / "photos"), "-o", "site"]) == 0
    assert (workdir / "site" / "thumbs" / "A.png").is_file()
    assert not (workdir / "gallery").exists()

import subprocess

import pytest

from imagegallery import external
from imagegallery.external import build_commands, make_external_thumbnail
from imagegallery.thumbnail import ThumbnailError


class FakeRun:
    """Records commands and fails for every tool in ``failing``."""

    def __init__(self, failing=(), missing=()):
        self.failing = set(failing)
        self.missing = set(missing)
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        if command[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", command[0])
        if command[0] in self.failing:
            raise subprocess.CalledProcessError(1, command)
        return subprocess.CompletedProcess(command, 0)


def test_command_order_and_arguments():
    commands = build_commands("in.png", "out.png", 320)

    assert [name for name, _ in commands] == ["imagemagick", "ffmpeg", "sips"]
    magick, ffmpeg, sips = (argv for _, argv in commands)
    assert magick == ["convert", "in.png", "-resize", "320x320", "-quality", "85", "out.png"]
    assert ffmpeg[0] == "ffmpeg"
    assert "scale=320:320:force_original_aspect_ratio=decrease" in ffmpeg
    assert ffmpeg[-1] == "out.png"
    assert sips == ["sips", "-Z", "320", "in.png", "--out", "out.png"]


def test_first_tool_wins(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(external.subprocess, "run", fake)

    assert make_external_thumbnail("in.png", "out.png") == "imagemagick"
    assert len(fake.calls) == 1


def test_output_is_merged_and_discarded(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(external.subprocess, "run", fake)

    make_external_thumbnail("in.png", "out.png")
    _, kwargs = fake.calls[0]
    assert kwargs["stdout"] == subprocess.DEVNULL
    assert kwargs["stderr"] == subprocess.STDOUT
    assert "timeout" not in kwargs


def test_falls_through_failures_and_missing_tools(monkeypatch):
    fake = FakeRun(failing={"convert"}, missing={"ffmpeg"})
    monkeypatch.setattr(external.subprocess, "run", fake)

    assert make_external_thumbnail("in.png", "out.png") == "sips"
    assert [argv[0] for argv, _ in fake.calls] == ["convert", "ffmpeg", "sips"]


def test_all_tools_failing_raises(monkeypatch):
    fake = FakeRun(failing={"convert", "sips"}, missing={"ffmpeg"})
    monkeypatch.setattr(external.subprocess, "run", fake)

    with pytest.raises(ThumbnailError, match="All external tools failed"):
        make_external_thumbnail("in.png", "out.png")
    assert len(fake.calls) == 3

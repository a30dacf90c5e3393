import pytest
from PIL import Image


@pytest.fixture
def make_image():
    def _make(path, size, color=(200, 40, 40), mode="RGB"):
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path)
        return path
    return _make

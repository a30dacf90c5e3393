from imagegallery.render import (
    render_index_html,
    render_item,
    write_gallery_assets,
    DEFAULT_TITLE,
)


def test_item_links_full_image_and_lazy_thumbnail():
    item = render_item("A.png")
    assert 'href="images/A.png"' in item
    assert 'data-full="images/A.png"' in item
    assert '<img src="thumbs/A.png" alt="A.png" loading="lazy">' in item
    assert item.index("<a ") < item.index("<img ") < item.index("</a>")


def test_item_quotes_urls_and_escapes_alt():
    item = render_item('a b&"c".jpg')
    assert 'href="images/a%20b%26%22c%22.jpg"' in item
    assert 'alt="a b&amp;&quot;c&quot;.jpg"' in item


def test_items_keep_order():
    page = render_index_html(DEFAULT_TITLE, ["A.png", "b.JPG", "c.jpeg"])
    positions = [page.index(f"thumbs/{name}") for name in ("A.png", "b.JPG", "c.jpeg")]
    assert positions == sorted(positions)


def test_title_is_escaped():
    page = render_index_html("Cats <& Dogs>", [])
    assert "<title>Cats &lt;&amp; Dogs&gt;</title>" in page
    assert "<h1>Cats &lt;&amp; Dogs&gt;</h1>" in page


def test_lightbox_is_always_emitted():
    for items in ([], ["only.png"]):
        page = render_index_html("t", items)
        assert '<div id="lightbox" class="hidden">' in page
        assert 'id="prev"' in page
        assert 'id="next"' in page
        assert 'id="lb-img"' in page
        assert '<script src="script.js"></script>' in page


def test_write_gallery_assets(tmp_path):
    index_path = write_gallery_assets(str(tmp_path), "Trip", ["x.png"])

    assert index_path == str(tmp_path / "index.html")
    assert "thumbs/x.png" in (tmp_path / "index.html").read_text(encoding="utf-8")
    assert ".grid{" in (tmp_path / "style.css").read_text(encoding="utf-8")
    script = (tmp_path / "script.js").read_text(encoding="utf-8")
    assert "ArrowRight" in script
    assert "touchend" in script

# -*- coding: utf-8 -*-
import os
import html
import urllib.parse
from typing import List

DEFAULT_TITLE = "My Photo Gallery"

INDEX_FILENAME = "index.html"
STYLE_FILENAME = "style.css"
SCRIPT_FILENAME = "script.js"

STYLE_CSS = """/* Minimal gallery CSS - responsive grid and lightbox */
body{font-family: system-ui, -apple-system, Roboto, 'Segoe UI', sans-serif; margin:0; background:#111; color:#eee;}
header{padding:12px 16px; text-align:center; background:#0d0d0d; box-shadow:0 1px 4px rgba(0,0,0,0.6);}
h1{margin:0; font-size:1.1rem;}
.grid{display:grid; grid-template-columns:repeat(auto-fill,minmax(140px,1fr)); gap:8px; padding:12px;}
.thumb{display:block; overflow:hidden; border-radius:6px; background:#222; border:1px solid rgba(255,255,255,0.03);}
.thumb img{width:100%; height:100%; object-fit:cover; display:block;}
#lightbox{position:fixed; inset:0; display:flex; align-items:center; justify-content:center; z-index:9999;}
#lb-bg{position:absolute; inset:0; background:rgba(0,0,0,0.85);}
#lb-img{max-width:95%; max-height:90%; z-index:10000; border-radius:6px; box-shadow:0 10px 30px rgba(0,0,0,0.7);}
#prev,#next{position:fixed; top:50%; transform:translateY(-50%); z-index:10001; background:transparent; border:none; color:#fff; font-size:32px; cursor:pointer; padding:10px;}
#prev{left:10px;} #next{right:10px;}
.hidden{display:none;}
"""

SCRIPT_JS = """/* Minimal gallery JS: click, keyboard and swipe navigation */
(function(){
  const thumbs = Array.from(document.querySelectorAll('.thumb'));
  const lb = document.getElementById('lightbox');
  const lbImg = document.getElementById('lb-img');
  const prevBtn = document.getElementById('prev');
  const nextBtn = document.getElementById('next');
  let idx = -1;
  function openAt(i){
    if (!thumbs.length) return;
    idx = (i + thumbs.length) % thumbs.length;
    lbImg.src = thumbs[idx].dataset.full;
    lb.classList.remove('hidden');
  }
  function closeLb(){ lb.classList.add('hidden'); lbImg.src = ''; }
  function next(){ openAt(idx + 1); }
  function prev(){ openAt(idx - 1); }
  thumbs.forEach((t, i) => t.addEventListener('click', e => { e.preventDefault(); openAt(i); }));
  document.getElementById('lb-bg').addEventListener('click', closeLb);
  nextBtn.addEventListener('click', e => { e.stopPropagation(); next(); });
  prevBtn.addEventListener('click', e => { e.stopPropagation(); prev(); });
  document.addEventListener('keydown', e => {
    if (lb.classList.contains('hidden')) return;
    if (e.key === 'ArrowRight') next();
    if (e.key === 'ArrowLeft') prev();
    if (e.key === 'Escape') closeLb();
  });
  let startX = 0;
  lbImg.addEventListener('touchstart', e => { startX = e.touches[0].clientX; });
  lbImg.addEventListener('touchend', e => {
    const dx = e.changedTouches[0].clientX - startX;
    if (dx > 30) prev(); else if (dx < -30) next();
  });
})();
"""


def render_item(name: str) -> str:
    url_name = urllib.parse.quote(name)
    return (
        f'    <a href="images/{url_name}" class="thumb" data-full="images/{url_name}">'
        f'<img src="thumbs/{url_name}" alt="{html.escape(name)}" loading="lazy"></a>\n'
    )


def render_index_html(title: str, items: List[str]) -> str:
    escaped_title = html.escape(title)
    thumbs = "".join(render_item(name) for name in items)
    return (
        "<!doctype html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"<title>{escaped_title}</title>\n"
        f'<link rel="stylesheet" href="{STYLE_FILENAME}">\n'
        "</head>\n<body>\n"
        f"<header><h1>{escaped_title}</h1></header>\n"
        f'<main class="grid">\n{thumbs}</main>\n'
        '<div id="lightbox" class="hidden">\n<div id="lb-bg"></div>\n'
        '<button id="prev" aria-label="Previous">&#9664;</button>'
        '<img id="lb-img" src="" alt="">'
        '<button id="next" aria-label="Next">&#9654;</button>\n</div>\n'
        f'<script src="{SCRIPT_FILENAME}"></script>\n'
        "</body>\n</html>\n"
    )


def render_style_css() -> str:
    return STYLE_CSS


def render_script_js() -> str:
    return SCRIPT_JS


def write_text_file(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def write_gallery_assets(output_dir: str, title: str, items: List[str]) -> str:
    """Write index.html, style.css and script.js; return the index path."""
    write_text_file(os.path.join(output_dir, STYLE_FILENAME), render_style_css())
    write_text_file(os.path.join(output_dir, SCRIPT_FILENAME), render_script_js())
    index_path = os.path.join(output_dir, INDEX_FILENAME)
    write_text_file(index_path, render_index_html(title, items))
    return index_path

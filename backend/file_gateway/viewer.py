"""
Minimal HTML pages for the ``/view`` route.
"""
from __future__ import annotations

from html import escape

from .mime_types import ContentClass, FileType

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>
body{{margin:0;font-family:sans-serif;background:#1e1e1e;}}
.header{{background:#333;color:white;padding:15px;text-align:center;font-size:18px;}}
.content{{height:calc(100vh - 55px);width:100%;}}
iframe,video,pre{{height:100%;width:100%;border:0;}}
pre{{white-space:pre-wrap;color:white;padding:1em;box-sizing:border-box;margin:0;}}
.notice{{color:#f0ad4e;padding:0 1em;}}
</style>
</head>
<body><div class="header">{title}</div><div class="content">{body}</div></body>
</html>
"""

# Content classes rendered by embedding the raw URL in a page.
EMBEDDED_CLASSES = (ContentClass.PDF, ContentClass.VIDEO, ContentClass.AUDIO)


def render_page(title: str, body: str) -> str:
    return PAGE_TEMPLATE.format(title=escape(title), body=body)


def render_embed_page(title: str, file_type: FileType, raw_url: str) -> str:
    src = escape(raw_url, quote=True)
    mime = escape(file_type.mime_type, quote=True)
    if file_type.content_class is ContentClass.PDF:
        body = f'<iframe src="{src}"></iframe>'
    elif file_type.content_class is ContentClass.VIDEO:
        body = f'<video controls style="background:black;"><source src="{src}" type="{mime}"></video>'
    else:
        body = f'<audio controls><source src="{src}" type="{mime}"></audio>'
    return render_page(title, body)


def render_text_page(title: str, text: str, truncated: bool = False) -> str:
    body = f"<pre>{escape(text)}</pre>"
    if truncated:
        body = '<p class="notice">Preview truncated; download the file for the full content.</p>' + body
    return render_page(title, body)

"""
Shared <head> and page masters for assembled book HTML.

Three CSS page masters:
    cover_style  full-bleed cover, no margins
    blank_page   content margins, no running header/footer
    content      content margins, running title header and page counter

Per-part documents reserve the content margins but never draw running
heads; those are stamped onto the merged PDF instead.
"""

from jinja2 import Environment, BaseLoader

from config.constants import BODY_TEXT_INDENT_CM
from config.settings import Settings


HEAD_TEMPLATE = """<head>
<meta charset="utf-8">
<title>{{ title|e }}</title>
<style>
@import url('https://fonts.googleapis.com/css2?family=League+Gothic&family=Merriweather:wght@300;400;700&family=Merriweather+Sans:wght@300;400;700;800&display=swap');

@page cover_style { size: {{ page_width }}mm {{ page_height }}mm; margin: 0; }

@page blank_page {
  size: {{ page_width }}mm {{ page_height }}mm;
  margin: {{ margins }};
  @top-center { content: ""; }
  @bottom-center { content: ""; }
}

@page content {
  size: {{ page_width }}mm {{ page_height }}mm;
  margin: {{ margins }};
{%- if running_heads %}
  @top-center {
    content: "{{ running_title }}";
    font-family: 'Merriweather Sans', sans-serif;
    font-weight: 300; font-size: 8pt; color: #002366;
  }
  @bottom-center {
    content: counter(page);
    font-family: 'Merriweather Sans', sans-serif;
    font-weight: 800; font-size: 16pt; color: rgba(0, 0, 0, 0.4);
  }
{%- endif %}
}
{%- if running_heads %}
@page :first { @top-center { content: ""; } @bottom-center { content: ""; } }
@page content:first { @top-center { content: ""; } }
{%- endif %}

body { font-family: 'Merriweather', serif; font-size: 12pt; color: #262626; margin: 0; }
.page-container { page-break-after: always; width: 100%; box-sizing: border-box; }
.content-page { page: content; }
.content-page.front-matter { page: blank_page; }

.cover-page { page: cover_style; position: relative; overflow: hidden; background-color: #e8eef7; background-size: cover; background-position: center; width: {{ page_width }}mm; height: {{ page_height }}mm; padding: 0; margin: 0; }
.cover-layout { display: flex; flex-direction: column; justify-content: space-between; align-items: center; width: 100%; height: 100%; text-align: center; box-sizing: border-box; padding: 20mm; }
.cover-title { font-family: 'League Gothic', sans-serif; font-size: 48pt; line-height: 1; text-transform: uppercase; color: #001f5c; margin: 0; }
.cover-subtitle { font-family: 'Merriweather Sans', sans-serif; font-weight: 300; font-size: 14.4pt; line-height: 1.25; color: #2b4b8a; margin-top: 15mm; }
.cover-author { font-family: 'Merriweather Sans', sans-serif; font-weight: 400; font-size: 10pt; text-transform: uppercase; color: #4a68a5; margin: 0; }

.copyright-page { display: flex; flex-direction: column; justify-content: flex-end; align-items: center; height: 160mm; }
.copyright-content { text-align: center; font-family: 'Merriweather Sans', sans-serif; font-size: 10pt; width: 100%; }
.copyright-content .legal-notice { margin-top: 10px; }
.copyright-content .imprint-notice { margin-top: 20px; font-size: 8pt; color: #555; }
.content-page p.toc-chapter { font-weight: 700; margin-top: 12pt; }
.content-page p.toc-subchapter { margin-left: 1cm; font-family: 'Merriweather Sans', sans-serif; font-size: 10pt; font-weight: 300; line-height: 1.4; }

.chapter-title-page { display: flex; justify-content: center; align-items: center; text-align: center; height: 160mm; }
.chapter-title-standalone { font-size: 24pt; }

.content-page h2.font-merriweather {
  font-family: 'Merriweather', serif; font-weight: 700; font-size: 24pt; line-height: 1.5;
  text-align: center; color: rgba(51, 51, 51, 0.5); margin-top: 36pt; margin-bottom: 54pt;
}
.content-page h3.font-merriweather-sans {
  font-family: 'Merriweather Sans', sans-serif; font-weight: 800; font-size: 14.4pt; line-height: 1.25;
  color: rgba(36, 36, 36, 0.75); margin-top: 36pt; margin-bottom: 18pt;
}
.content-page p {
  text-align: justify; hyphens: auto; orphans: 2; widows: 2; text-indent: {{ text_indent }}cm;
  margin-top: 0; margin-bottom: 18pt; font-weight: 300; line-height: 1.5;
}
.content-page h2 + p, .content-page h3 + p, .content-page ul + p, .content-page ol + p,
.content-page .copyright-content p, .content-page p.toc-chapter, .content-page p.toc-subchapter { text-indent: 0; }
.content-page .copyright-content p { text-align: center; }
.content-page p.toc-chapter, .content-page p.toc-subchapter { text-align: left; margin-bottom: 0; }

ul.book-list, ol.book-list { margin-bottom: 18pt; padding-left: 1cm; }
ul.book-list li, ol.book-list li { font-size: 12pt; font-weight: 300; line-height: 1.5; margin-bottom: 6pt; text-align: left; }
strong { font-weight: 700; color: #262626; }
.content-page p.plain-text { white-space: pre-wrap; text-indent: 0; text-align: left; }
</style>
</head>"""

_environment = Environment(loader=BaseLoader(), autoescape=False)
_head_template = _environment.from_string(HEAD_TEMPLATE)


def running_title(title: str) -> str:
    """Book title as shown in the running header: uppercased, CSS-string safe."""
    return (
        (title or "")
        .upper()
        .replace("\\", "\\\\")
        .replace('"', "'")
        .replace("<", "")
        .replace("\n", " ")
    )


def render_head(title: str, settings: Settings, running_heads: bool = True) -> str:
    """
    Render the shared <head> block.

    Args:
        title: Book title
        settings: Page geometry source
        running_heads: Draw the title header and page counter on content
                       pages (full document) or leave them blank (per-part
                       documents)
    """
    margins = " ".join(f"{value:g}mm" for value in settings.page_margins_mm)
    return _head_template.render(
        title=title or "",
        running_title=running_title(title),
        running_heads=running_heads,
        page_width=f"{settings.page_width_mm:g}",
        page_height=f"{settings.page_height_mm:g}",
        margins=margins,
        text_indent=f"{BODY_TEXT_INDENT_CM:g}",
    )

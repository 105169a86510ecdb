"""
Conversion between editor HTML and stored Markdown.

Markdown cannot express image sizing, alignment or captions, so images,
figures, figure captions and caption paragraphs are kept as literal HTML
inside the Markdown body. Rendering lets that embedded HTML through
unescaped and then links every inline image to its own source.
"""
import markdown2
from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

MARKDOWN_EXTRAS = ['tables', 'fenced-code-blocks', 'strike']
CAPTION_CLASS = 'image-caption'


def _is_caption_paragraph(el):
    return CAPTION_CLASS in (el.get('class') or [])


class EditorMarkdownConverter(MarkdownConverter):
    """markdownify converter that keeps image markup verbatim."""

    def convert_img(self, el, text, *args, **kwargs):
        return str(el)

    def convert_figure(self, el, text, *args, **kwargs):
        return f'\n\n{el}\n\n'

    def convert_figcaption(self, el, text, *args, **kwargs):
        return f'\n\n{el}\n\n'

    def convert_p(self, el, text, *args, **kwargs):
        if _is_caption_paragraph(el):
            return f'\n\n{el}\n\n'
        return super().convert_p(el, text, *args, **kwargs)


def html_to_markdown(html):
    """Convert rich-text editor HTML into Markdown for storage."""
    if not html:
        return ''
    converter = EditorMarkdownConverter(heading_style=ATX, bullets='-')
    return converter.convert(html).strip()


def wrap_images(html):
    """
    Wrap every ``<img>`` that is not already inside a link in an anchor
    pointing at the image source. Running it again changes nothing.
    """
    if not html or '<img' not in html:
        return html or ''

    soup = BeautifulSoup(html, 'html.parser')
    for img in soup.find_all('img'):
        src = img.get('src')
        if not src or img.find_parent('a') is not None:
            continue
        anchor = soup.new_tag('a', href=src, target='_blank', rel='noopener noreferrer')
        img.wrap(anchor)
    return str(soup)


def markdown_to_html(markdown):
    """Render stored Markdown (with embedded HTML) for display."""
    if not markdown:
        return ''
    html = markdown2.markdown(markdown, extras=MARKDOWN_EXTRAS)
    return wrap_images(str(html))

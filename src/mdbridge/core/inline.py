"""Inline span rewriting: emphasis, code, links, images, and autolinks"""

import re

from mdbridge.config import ConversionConfig


CODE_RE = re.compile(r'`([^`]+)`')
IMAGE_RE = re.compile(r'!\[([^\]]*)\]\((\S+?)(?:\s+"([^"]+)")?\)')
LINK_RE = re.compile(r'\[([^\]]+)\]\((\S+?)(?:\s+"([^"]+)")?\)')
URL_RE = re.compile(r'https?://[^\s<>"\x00]+')
EMAIL_RE = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')

# Bold before italic: a single-marker pattern would otherwise eat half of a '**' run.
EMPHASIS_RULES = [
    (re.compile(r'\*\*(.+?)\*\*'), r'<strong>\1</strong>'),
    (re.compile(r'(?<!\w)__(.+?)__(?!\w)'), r'<strong>\1</strong>'),
    (re.compile(r'\*(.+?)\*'), r'<em>\1</em>'),
    (re.compile(r'(?<!\w)_(.+?)_(?!\w)'), r'<em>\1</em>'),
]
STRIKE_RULE = (re.compile(r'~~(.+?)~~'), r'<del>\1</del>')

PLACEHOLDER_RE = re.compile(r'\x00(\d+)\x00')
# NUL never survives into output; it is reserved for placeholders.
NUL_REPLACEMENT = '\ufffd'


class _Stash:
    """Holds finished HTML fragments out of reach of later rewrite passes."""

    def __init__(self):
        self.fragments: list[str] = []

    def put(self, fragment: str) -> str:
        self.fragments.append(fragment)
        return f"\x00{len(self.fragments) - 1}\x00"

    def shield(self, text: str) -> str:
        """Stash bare URLs and emails verbatim so autolinking skips them."""
        text = URL_RE.sub(lambda m: self.put(m.group(0)), text)
        return EMAIL_RE.sub(lambda m: self.put(m.group(0)), text)

    def restore(self, text: str, limit: int = None) -> str:
        """Expand placeholders below limit, recursing into the fragments they name.

        A fragment only embeds placeholders created before it (e.g. code inside
        image alt), so each recursion lowers the limit and expansion terminates.
        """
        limit = len(self.fragments) if limit is None else limit

        def expand(m: re.Match) -> str:
            index = int(m.group(1))
            if index >= limit:
                return m.group(0)
            return self.restore(self.fragments[index], index)

        return PLACEHOLDER_RE.sub(expand, text)


def _title_attr(title: str | None) -> str:
    return f' title="{title}"' if title else ''


def process_inline(text: str, config: ConversionConfig) -> str:
    """Rewrite inline Markdown markers in one block's text into HTML tags.

    Plain text is not escaped; the result is not safe for untrusted input.
    """
    stash = _Stash()
    text = text.replace('\x00', NUL_REPLACEMENT)

    text = CODE_RE.sub(lambda m: stash.put(f'<code>{m.group(1)}</code>'), text)
    text = IMAGE_RE.sub(
        lambda m: stash.put(f'<img src="{m.group(2)}" alt="{m.group(1)}"{_title_attr(m.group(3))} />'),
        text,
    )
    # Link text stays in the stream so emphasis inside it is still rewritten.
    text = LINK_RE.sub(
        lambda m: stash.put(f'<a href="{m.group(2)}"{_title_attr(m.group(3))}>') + stash.shield(m.group(1)) + stash.put('</a>'),
        text,
    )
    if config.enable_autolinks:
        text = URL_RE.sub(lambda m: stash.put(f'<a href="{m.group(0)}">{m.group(0)}</a>'), text)
        text = EMAIL_RE.sub(lambda m: stash.put(f'<a href="mailto:{m.group(0)}">{m.group(0)}</a>'), text)

    rules = EMPHASIS_RULES + [STRIKE_RULE] if config.enable_strikethrough else EMPHASIS_RULES
    for pattern, repl in rules:
        text = pattern.sub(repl, text)

    return stash.restore(text)

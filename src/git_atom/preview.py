"""
Article previews for feed entries.
"""

import re

FULL_ARTICLE = -1
NO_PREVIEW = 0

# Only "\n" ends a line; form feeds and Unicode separators stay inside it
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+\Z")


def extract_preview(body: str | None, lines: int) -> str | None:
    """Cut the preview shown inside a feed entry out of a chapter body.

    Args:
        body: Chapter content as handed over by mdBook
        lines: ``-1`` for the whole body, ``0`` for no preview, otherwise
            the number of leading lines to keep

    Returns:
        The preview text, or None when there is nothing to show. Truncated
        previews carry no ellipsis marker.
    """
    if not body or not body.strip() or lines == NO_PREVIEW:
        return None

    if lines == FULL_ARTICLE:
        return body

    kept = _LINE_RE.findall(body)
    if len(kept) <= lines:
        return body

    head = kept[:lines]
    # The separator after the last kept line belongs to the cut-off part
    head[-1] = head[-1].removesuffix("\n").removesuffix("\r")
    return "".join(head)

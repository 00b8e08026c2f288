"""
Input sanitization applied before user content is stored.

Posts, comments, chat messages and recognitions are plain text: every tag
is stripped. Links are restricted to safe schemes and uploaded file names
are reduced to a harmless basename.
"""

import re
from pathlib import PurePath
from typing import Optional

import bleach

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\- ()]+", re.UNICODE)


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags and surrounding whitespace.

    Args:
        content: Raw content from user input

    Returns:
        Plain text, or None if input is None

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Hola')
        'alert(1)Hola'
        >>> sanitize_plain_text('<b>Clase</b> de mate')
        'Clase de mate'
    """
    if content is None:
        return None
    return bleach.clean(content, tags=[], strip=True).strip()


def sanitize_url(url: Optional[str]) -> Optional[str]:
    """
    Allow only http(s) and mailto links, or relative paths.

    Examples:
        >>> sanitize_url('javascript:alert(1)')
        ''
        >>> sanitize_url('https://meet.google.com/abc')
        'https://meet.google.com/abc'
    """
    if url is None:
        return None

    url = url.strip()
    if url.lower().startswith(("http://", "https://", "mailto:")):
        return url
    if url.startswith("/") or ":" not in url.split("/")[0]:
        return url
    return ""


def sanitize_filename(filename: Optional[str], default: str = "archivo") -> str:
    """
    Reduce a client-supplied file name to a safe display name.

    Directory components are dropped and unusual characters replaced, so the
    result can be shown back to users and used in Content-Disposition.

    Examples:
        >>> sanitize_filename('../../etc/passwd')
        'passwd'
        >>> sanitize_filename('Guía <final>.pdf')
        'Guía _final_.pdf'
    """
    if not filename:
        return default
    name = PurePath(filename.replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip(" .")
    return name[:255] or default

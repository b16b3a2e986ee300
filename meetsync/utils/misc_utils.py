# meetsync/utils/misc_utils.py
import re
from typing import Optional
from urllib.parse import urljoin


def clean_text(text: Optional[str]) -> Optional[str]:
    """Collapses runs of whitespace (including &nbsp;) and strips; blank -> None."""
    if text is None:
        return None
    cleaned = re.sub(r"\s+", " ", text.replace("\xa0", " ")).strip()
    return cleaned or None


def absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolves a link target found on a listing page against the site base URL."""
    if not href or not href.strip():
        return None
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return href
    # Relative hrefs without a leading slash hang off the site root, not the page
    return urljoin(base_url.rstrip("/") + "/", href.lstrip("/"))

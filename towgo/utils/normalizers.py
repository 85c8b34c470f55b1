"""
Data normalizers shared by the search providers.
They turn loosely-shaped text and JSON coming back from search engines and
LLMs into the fields of our own models.
"""

import json
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

# Common US phone formats, e.g. (555) 123-4567, 555.123.4567, +1 555 123 4567
PHONE_REGEX = re.compile(r"(\+?1[-\s.]?)?\(?([0-9]{3})\)?[-\s.]?([0-9]{3})[-\s.]?([0-9]{4})")

ADDRESS_REGEX = re.compile(
    r"\d+\s+[A-Za-z0-9\s,]+(?:Avenue|Ave|Street|St|Road|Rd|Boulevard|Blvd|Drive|Dr|"
    r"Lane|Ln|Place|Pl|Court|Ct|Highway|Hwy|Parkway|Pkwy)[,.\s]+"
    r"(?:[A-Za-z\s]+,\s*)?[A-Z]{2}\s+\d{5}(?:-\d{4})?"
)

FENCED_JSON_REGEX = re.compile(r"```json\n([\s\S]*?)```")
FENCED_REGEX = re.compile(r"```\n([\s\S]*?)```")


def extract_phone_numbers(text: str) -> List[str]:
    """Return phone-number-looking substrings in order of appearance."""
    return [match.group(0).strip() for match in PHONE_REGEX.finditer(text or "")]


def extract_addresses(text: str) -> List[str]:
    """Return US street-address-looking substrings in order of appearance."""
    return [match.group(0).strip() for match in ADDRESS_REGEX.finditer(text or "")]


def parse_json_array(content: str) -> Optional[List[Any]]:
    """
    Parse a JSON array out of model output.

    Tries the whole text first, then the span between the first `[` and the
    last `]`. Returns None when neither parses to a list.
    """
    text = (content or "").strip()
    try:
        parsed = json.loads(text)
    except ValueError:
        start = text.find("[")
        end = text.rfind("]")
        if start == -1 or end == -1 or end <= start:
            return None
        try:
            parsed = json.loads(text[start:end + 1])
        except ValueError:
            return None
    return parsed if isinstance(parsed, list) else None


def unwrap_fenced_json(content: str) -> str:
    """Strip a markdown code fence around JSON, if any."""
    match = FENCED_JSON_REGEX.search(content or "") or FENCED_REGEX.search(content or "")
    if match:
        return match.group(1)
    return content or ""


def citation_title(url: str) -> str:
    """Last path segment of a URL, or the URL itself."""
    segment = url.rstrip("\n").split("/")[-1]
    return segment or url


def as_text(value: Any) -> Optional[str]:
    """Coerce a scalar to a stripped string, None for empty values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def as_text_list(value: Any) -> Optional[List[str]]:
    """Coerce a string or list into a list of non-empty strings."""
    if value is None:
        return None
    items = value if isinstance(value, list) else [value]
    cleaned = [str(item).strip() for item in items if item is not None and str(item).strip()]
    return cleaned or None


def normalize_url(url: Optional[str]) -> str:
    """Lower-cased host + path without scheme, `www.` or trailing slash."""
    if not url:
        return ""
    parsed = urlparse(url.strip() if "://" in url else f"http://{url.strip()}")
    host = parsed.netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    return f"{host}{parsed.path.rstrip('/')}".lower()


def normalize_address(address: Optional[str]) -> str:
    """Collapse punctuation, case and whitespace in a street address."""
    if not address:
        return ""
    return " ".join(re.sub(r"[^a-z0-9\s]", " ", address.lower()).split())


def dedup_key(business: Dict[str, Any]) -> str:
    """
    Key used to drop the same business reported by several providers.

    Address first, then URL, then title.
    """
    address = normalize_address(business.get("address"))
    if address:
        return f"address:{address}"
    url = normalize_url(business.get("url"))
    if url:
        return f"url:{url}"
    return f"title:{(business.get('title') or '').strip().lower()}"

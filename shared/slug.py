import re
import unicodedata
from uuid import uuid4

SLUG_SEPARATOR = "-"
SLUG_MAX_LENGTH = 120

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def derive_slug(name: str | None) -> str:
    """
    Turn a display name into a URL slug.

    "Crème Brûlée Mug (Large)" -> "creme-brulee-mug-large". A name with nothing
    ASCII-foldable left (e.g. "日本茶") gets a random hex slug instead. Returns an
    empty string only for a blank name.
    """
    condensed = " ".join(str(name or "").split()).lower()
    if not condensed:
        return ""
    ascii_name = (
        unicodedata.normalize("NFKD", condensed)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    slug = _NON_ALNUM.sub(SLUG_SEPARATOR, ascii_name).strip(SLUG_SEPARATOR)
    slug = slug[:SLUG_MAX_LENGTH].rstrip(SLUG_SEPARATOR)
    return slug or uuid4().hex

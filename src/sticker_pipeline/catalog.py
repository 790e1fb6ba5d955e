"""
Catalog scraper: listing page -> set of sticker set identifiers.

Listing sites link each pack as /stickers/<name>. Links are normalized
(absolute or relative, trailing slash, query and fragment stripped) so the
same pack reached through different hrefs yields one identifier. Absolute
links pointing at another host are ignored.
"""

import logging
from urllib.parse import urlparse

import aiohttp
from bs4 import BeautifulSoup

from config.config import DEFAULT_CATALOG_EXCLUDE, DEFAULT_CATALOG_SOURCES
from core.download.http_client import download_url
from core.errors.exceptions import InputError, ParseError, UpstreamError
from sticker_pipeline.schemas.models import is_valid_collection_id

logger = logging.getLogger(__name__)

COLLECTION_PATH_PREFIX = "/stickers/"


def _collection_id_from_href(href: str, allowed_hosts: frozenset = frozenset()) -> str | None:
    parsed = urlparse(href.strip())
    # Relative links always belong to the listing site
    if parsed.netloc and parsed.netloc.lower() not in allowed_hosts:
        return None
    path = parsed.path
    if not path.startswith(COLLECTION_PATH_PREFIX):
        return None
    rest = path[len(COLLECTION_PATH_PREFIX) :].strip("/")
    name = rest.rsplit("/", 1)[-1]
    if not is_valid_collection_id(name):
        return None
    return name


def extract_collection_ids(
    html: str,
    exclude: frozenset = DEFAULT_CATALOG_EXCLUDE,
    allowed_hosts: frozenset = frozenset(),
) -> set[str]:
    """
    Extract pack identifiers from anchor hrefs in a listing document.

    Absolute links are only followed when their host is in allowed_hosts.
    A document without any pack links, including an empty or text-only one,
    yields an empty set.

    Raises:
        ParseError: if the HTML parser rejects the document
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        raise ParseError("Catalog page could not be parsed as HTML", cause=e) from e

    found = set()
    for link in soup.find_all("a", href=True):
        name = _collection_id_from_href(link["href"], allowed_hosts)
        if name and name not in exclude:
            found.add(name)
    return found


class CatalogScraper:
    """Discover sticker set identifiers from paginated listing sites."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        sources: dict[int, str] | None = None,
        exclude: frozenset = DEFAULT_CATALOG_EXCLUDE,
        timeout: float = 30,
    ):
        self.session = session
        self.sources = sources if sources is not None else dict(DEFAULT_CATALOG_SOURCES)
        self.exclude = frozenset(exclude)
        self.timeout = timeout

    def listing_url(self, page: int, source_variant: int = 0) -> str:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise InputError(f"Page must be a positive integer, got {page!r}")
        base = self.sources.get(source_variant)
        if base is None:
            raise InputError(
                f"Unknown catalog source {source_variant!r}; expected one of {sorted(self.sources)}"
            )
        return f"{base}?page={page}"

    async def list_collections(self, page: int, source_variant: int = 0) -> set[str]:
        """
        Return the identifiers linked from one listing page.

        An empty set means the page had no pack links; it is not an error.

        Raises:
            InputError: invalid page or source variant
            UpstreamError: listing could not be downloaded
            ParseError: listing is not UTF-8 text or the parser rejects it
        """
        url = self.listing_url(page, source_variant)
        response, error = await download_url(url, self.session, timeout=self.timeout)
        if error:
            raise UpstreamError(
                f"Catalog listing unavailable: {error.error_message}",
                status_code=error.status_code,
                context={"listing_url": url},
            )

        try:
            html = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("Catalog page is not valid UTF-8 text", cause=e) from e

        host = urlparse(self.sources[source_variant]).netloc.lower()
        found = extract_collection_ids(html, self.exclude, frozenset({host}))
        logger.info(
            "Catalog page scraped",
            extra={
                "listing_url": url,
                "page": page,
                "source_variant": source_variant,
                "collections_found": len(found),
            },
        )
        return found

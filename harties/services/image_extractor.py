"""
Best-effort logo and cover image discovery for business websites
"""
import re
from typing import Callable, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from harties.core.logging import log
from harties.schemas.common import ExtractedImages
from harties.schemas.seed import KeywordProfile
from harties.utils.normalization import first_matching

HERO_CLASSES = ["hero", "banner"]
GALLERY_CLASSES = ["gallery", "photo", "image"]
SLIDER_CLASSES = ["slide", "featured", "main"]
SIZE_KEYWORDS = ["main", "large"]

EXCLUDED_SUBSTRINGS = ("logo", "icon", "favicon")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

BACKGROUND_IMAGE = re.compile(r"background-image:\s*url\(\s*['\"]?([^'\")]+?)['\"]?\s*\)", re.IGNORECASE)
LARGE_DIMENSION = re.compile(r"\d{3,}")

COVER_PLACEHOLDER = "https://picsum.photos/1200/600?random={seed}"
LOGO_PLACEHOLDER = "https://picsum.photos/300/300?random={seed}&logo"


def resolve_url(src: Optional[str], page_url: str) -> Optional[str]:
    """Absolute URL for an image reference found on page_url"""
    if not src:
        return None
    src = src.strip()
    if not src or src.startswith("data:"):
        return None
    return urljoin(page_url, src)


def _classes(img: Tag) -> str:
    value = img.get("class") or []
    if isinstance(value, str):
        return value.lower()
    return " ".join(value).lower()


def _has_class(keywords: Iterable[str]) -> Callable[[Tag], bool]:
    keywords = [keyword.lower() for keyword in keywords]
    return lambda img: any(keyword in _classes(img) for keyword in keywords)


def _is_large(img: Tag) -> bool:
    return any(LARGE_DIMENSION.fullmatch(str(img.get(attr, "")).strip()) for attr in ("width", "height"))


class ImageExtractor:
    """
    Picks a logo and a cover image from a page.

    Logo: the first img hit over an ordered list of checks.
    Cover: candidates accumulated from background images, hero, gallery and
    slider classes and large dimensions, falling back to every image; the first
    candidate with a preferred keyword wins, else the first candidate, else the
    logo, else a placeholder.
    """

    def __init__(self, client: httpx.AsyncClient, keywords: Optional[KeywordProfile] = None):
        self.client = client
        self.keywords = keywords or KeywordProfile()

    def placeholder(self) -> ExtractedImages:
        seed = self.keywords.placeholder_seed
        return ExtractedImages(
            cover_image=COVER_PLACEHOLDER.format(seed=seed),
            logo_image=LOGO_PLACEHOLDER.format(seed=seed),
            all_images=[],
        )

    async def extract(self, url: str) -> ExtractedImages:
        """Fetch url and extract its images; never raises"""
        log.info(f"Extracting images from: {url}")
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return self.extract_from_html(response.text, str(response.url))
        except Exception as e:
            log.error(f"Error extracting images from {url}: {e}")
            return self.placeholder()

    def extract_from_html(self, html: str, page_url: str) -> ExtractedImages:
        soup = BeautifulSoup(html, "html.parser")
        images = [img for img in soup.find_all("img") if img.get("src")]

        logo = self._find_logo(images, page_url)
        if logo:
            log.info(f"Found logo: {logo}")

        candidates = self._find_cover_candidates(html, images, page_url, logo)
        if not candidates:
            log.debug("No hero images found, searching all images")
            candidates = self._filter(
                (resolve_url(img.get("src"), page_url) for img in images), logo, extra_excluded=("sprite",)
            )

        cover = None
        if candidates:
            cover = first_matching(candidates, self._preferred_keywords()) or candidates[0]
            log.info(f"Selected cover: {cover}")
        elif logo:
            log.warning("Using logo as cover (no other images found)")
            cover = logo

        placeholder = self.placeholder()
        result = ExtractedImages(
            cover_image=cover or placeholder.cover_image,
            logo_image=logo or placeholder.logo_image,
            all_images=candidates,
        )
        log.info(f"Images found: {len(candidates)} candidate(s), logo={'yes' if logo else 'no'}")
        return result

    def _logo_checks(self) -> List[Callable[[Tag], bool]]:
        checks: List[Callable[[Tag], bool]] = [
            _has_class(["logo"]),
            lambda img: "logo" in img["src"].lower(),
            _has_class(["brand"]),
            lambda img: "logo" in (img.get("alt") or "").lower(),
        ]
        for pattern in self.keywords.logo_keywords:
            regex = re.compile(pattern, re.IGNORECASE)
            checks.append(lambda img, regex=regex: bool(regex.search(img["src"])))
        return checks

    def _find_logo(self, images: List[Tag], page_url: str) -> Optional[str]:
        for check in self._logo_checks():
            for img in images:
                if check(img):
                    resolved = resolve_url(img["src"], page_url)
                    if resolved:
                        return resolved
        return None

    def _find_cover_candidates(self, html: str, images: List[Tag], page_url: str, logo: Optional[str]) -> List[str]:
        found = [resolve_url(match, page_url) for match in BACKGROUND_IMAGE.findall(html)]

        for check in (
            _has_class(HERO_CLASSES + self.keywords.hero_keywords),
            _has_class(GALLERY_CLASSES),
            _has_class(SLIDER_CLASSES),
            _is_large,
        ):
            found.extend(resolve_url(img["src"], page_url) for img in images if check(img))

        return self._filter(found, logo)

    def _filter(self, urls: Iterable[Optional[str]], logo: Optional[str], extra_excluded=()) -> List[str]:
        excluded = EXCLUDED_SUBSTRINGS + tuple(extra_excluded)
        accepted: List[str] = []
        for url in urls:
            if not url or url == logo or url in accepted:
                continue
            lowered = url.lower()
            if any(word in lowered for word in excluded):
                continue
            if not urlparse(lowered).path.endswith(IMAGE_EXTENSIONS):
                continue
            accepted.append(url)
        return accepted

    def _preferred_keywords(self) -> List[str]:
        return HERO_CLASSES + self.keywords.preferred_keywords + SIZE_KEYWORDS

"""
Seed configuration schemas loaded from configs/seed/*.yaml
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from harties.schemas.business import BusinessCreate
from harties.schemas.profile import UserRole


class KeywordProfile(BaseModel):
    """Per-business keywords steering the image extractor"""
    # Regex fragments matched against img src, e.g. "paddle[^/]*power"
    logo_keywords: List[str] = Field(default_factory=list)
    # Class-name keywords marking hero/cover images, e.g. "river", "farm"
    hero_keywords: List[str] = Field(default_factory=list)
    # URL substrings that make a candidate the preferred cover
    preferred_keywords: List[str] = Field(default_factory=list)
    placeholder_seed: str = "business"


class BusinessSeed(BaseModel):
    """One business entry: the row to insert plus how to source its images"""
    key: str
    owner_email: str
    image_source_url: Optional[str] = None
    keywords: KeywordProfile = Field(default_factory=KeywordProfile)
    business: BusinessCreate


class UserSeed(BaseModel):
    """A confirmed test account and its profile"""
    email: str
    password: str
    full_name: str
    role: UserRole = UserRole.USER
    description: Optional[str] = None
    business_slug: Optional[str] = None


class PublisherProfile(BaseModel):
    """Per-publisher settings for the article scraper"""
    name: str
    site_name: str
    boilerplate_phrases: List[str] = Field(default_factory=lambda: ["Sign up", "Subscribe", "Follow us"])
    max_paragraphs: int = 10
    min_paragraph_chars: int = 50
    # CSS selectors removed from the body on top of scripts, styles and ads
    strip_selectors: List[str] = Field(default_factory=list)
    # Featured-image URLs containing these are ignored
    image_exclude_keywords: List[str] = Field(default_factory=list)
    placeholder_seed: str = "news"
    derive_excerpt: bool = False
    extract_author: bool = False
    min_content_chars: int = 0
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    request_delay: float = 0.0

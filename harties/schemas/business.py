"""
Business schemas
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from harties.schemas.validators import PHONE_PATTERN, check_email, check_url
from harties.utils.html import sanitize_html, sanitize_text

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class DayHours(BaseModel):
    """Opening hours for one weekday"""
    open: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    close: str = Field(..., pattern=r"^\d{2}:\d{2}$")


class BusinessCreate(BaseModel):
    """Row inserted into the businesses table"""
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = Field(None, max_length=1000)
    long_description: Optional[str] = None
    industry: Optional[str] = None
    website_url: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    owner_id: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    # None marks a closed day
    business_hours: Dict[str, Optional[DayHours]] = Field(default_factory=dict)
    social_links: Dict[str, str] = Field(default_factory=dict)
    rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    is_verified: bool = False
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    available_images: List[str] = Field(default_factory=list)

    @field_validator("name", "description", "address", "phone")
    @classmethod
    def clean_text(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value) if value else value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value and not PHONE_PATTERN.match(value):
            raise ValueError("Invalid phone number format")
        return value

    @field_validator("long_description")
    @classmethod
    def clean_long_description(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_html(value) if value else value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return check_email(value)

    @field_validator("website_url")
    @classmethod
    def validate_website(cls, value: Optional[str]) -> Optional[str]:
        return check_url(value, "website URL")

    @field_validator("business_hours")
    @classmethod
    def validate_weekdays(cls, value: Dict[str, Optional[DayHours]]) -> Dict[str, Optional[DayHours]]:
        unknown = set(value) - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"Unknown weekday(s): {', '.join(sorted(unknown))}")
        return value


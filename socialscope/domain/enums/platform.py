from enum import Enum


class Platform(str, Enum):
    """Social networks a profile can be scraped from."""

    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"

from socialscope.domain.enums.platform import Platform

LINKEDIN_PROFILE_MARKER = "linkedin.com/in/"


class InvalidHandleError(ValueError):
    """Raised when a handle cannot be scraped on its platform."""


def normalize_handle(platform: Platform, handle: str) -> str:
    """
    Return the handle in the form the platform's actor expects.

    Instagram usernames lose a leading ``@``; LinkedIn profiles are scraped
    by URL and must point at a ``/in/`` profile page.
    """
    cleaned = (handle or "").strip()

    if platform is Platform.INSTAGRAM:
        cleaned = cleaned.lstrip("@").strip()
        if not cleaned:
            raise InvalidHandleError("Instagram username is required")
        return cleaned

    if LINKEDIN_PROFILE_MARKER not in cleaned.lower():
        raise InvalidHandleError(
            f"LinkedIn handle must be a profile URL containing '{LINKEDIN_PROFILE_MARKER}'"
        )
    return cleaned

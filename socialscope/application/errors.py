from uuid import UUID


class ProfileNotFoundError(Exception):
    def __init__(self, profile_id: UUID | str) -> None:
        self.profile_id = profile_id
        super().__init__(f"Profile {profile_id} not found.")


class ProfileAlreadyExistsError(Exception):
    """Raised by repositories when the (user, platform, username) key is taken."""


class ScrapeValidationError(Exception):
    """The scrape request is incomplete or names an unsupported handle."""


class ScrapeLaunchError(Exception):
    """Apify refused or could not be reached when starting a run."""


class MalformedWebhookError(Exception):
    """The callback body is not a JSON object of the expected shape."""


class WebhookAuthError(Exception):
    """The callback did not carry the configured shared secret."""

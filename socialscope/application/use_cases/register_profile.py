from dataclasses import dataclass

import structlog

from socialscope.application.errors import ProfileAlreadyExistsError, ScrapeValidationError
from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.domain.entities.profile import Profile
from socialscope.domain.enums.platform import Platform
from socialscope.domain.handles import InvalidHandleError, normalize_handle

logger = structlog.get_logger(__name__)


@dataclass
class RegisterProfileInput:
    user_id: str
    platform: str
    handle: str


@dataclass
class RegisterProfileOutput:
    profile: Profile
    created: bool


class RegisterProfile:
    """
    Use case: find or create the profile a user wants analysed.

    Profiles are unique per (user, platform, username); a concurrent insert
    of the same handle falls back to the row that won.
    """

    def __init__(self, profile_repo: ProfileRepository, event_publisher: EventPublisher) -> None:
        self._profile_repo = profile_repo
        self._event_publisher = event_publisher

    async def execute(self, input_data: RegisterProfileInput) -> RegisterProfileOutput:
        try:
            platform = Platform(input_data.platform.lower())
        except ValueError as exc:
            raise ScrapeValidationError(f"Unsupported platform: {input_data.platform}") from exc

        try:
            username = normalize_handle(platform, input_data.handle)
        except InvalidHandleError as exc:
            raise ScrapeValidationError(str(exc)) from exc

        existing = await self._profile_repo.find_by_handle(
            user_id=input_data.user_id, platform=platform, username=username
        )
        if existing is not None:
            return RegisterProfileOutput(profile=existing, created=False)

        profile = Profile.register(user_id=input_data.user_id, platform=platform, username=username)
        try:
            await self._profile_repo.save(profile)
        except ProfileAlreadyExistsError:
            winner = await self._profile_repo.find_by_handle(
                user_id=input_data.user_id, platform=platform, username=username
            )
            if winner is None:
                raise
            logger.info("profile_registration_conflict", profile_id=str(winner.id))
            return RegisterProfileOutput(profile=winner, created=False)

        await self._event_publisher.publish_many(profile.collect_events())
        logger.info(
            "profile_registered",
            profile_id=str(profile.id),
            platform=platform.value,
            username=username,
        )
        return RegisterProfileOutput(profile=profile, created=True)

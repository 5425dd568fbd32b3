from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus


class LaunchScrapeRequest(BaseModel):
    # Presence and format are checked by the use case so every rejection
    # reads the same way.
    platform: str | None = None
    handle: str | None = Field(default=None, validation_alias=AliasChoices("handle", "username"))
    profile_id: str | None = Field(default=None, validation_alias=AliasChoices("profileId", "profile_id"))


class LaunchScrapeResponse(BaseModel):
    success: bool = True
    profile_id: UUID = Field(serialization_alias="profileId")
    handle: str
    platform: Platform
    status: ScrapeStatus
    run_id: str = Field(serialization_alias="runId")


class ScrapeStatusProfile(BaseModel):
    id: UUID
    scrape_status: ScrapeStatus
    scrape_error: str | None = None
    last_scraped: datetime | None = None
    stage: str
    progress: int


class ScrapeStatusResponse(BaseModel):
    success: bool = True
    profile: ScrapeStatusProfile


class WebhookAcceptedResponse(BaseModel):
    success: bool = True
    message: str


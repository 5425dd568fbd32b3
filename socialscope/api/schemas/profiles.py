from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus


class RegisterProfileRequest(BaseModel):
    platform: str
    handle: str = Field(validation_alias=AliasChoices("handle", "username"))


class ProfileResponse(BaseModel):
    id: UUID
    user_id: str
    platform: Platform
    username: str
    scrape_status: ScrapeStatus
    scrape_error: str | None = None
    last_scraped: datetime | None = None
    apify_run_id: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RegisterProfileResponse(BaseModel):
    profile: ProfileResponse
    created: bool


class PaginatedProfilesResponse(BaseModel):
    profiles: list[ProfileResponse]
    total: int
    limit: int
    offset: int


class ProfileDataResponse(BaseModel):
    raw_data: list[dict[str, Any]]
    platform_specific_data: dict[str, Any]
    dataset_id: str | None = None
    item_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileDetailsResponse(BaseModel):
    profile: ProfileResponse
    data: ProfileDataResponse | None = None

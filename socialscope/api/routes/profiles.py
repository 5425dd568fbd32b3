from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from socialscope.api.dependencies import (
    get_current_user_id,
    get_delete_profile_use_case,
    get_profile_details_use_case,
    get_profile_repo,
    get_register_profile_use_case,
)
from socialscope.api.schemas.profiles import (
    PaginatedProfilesResponse,
    ProfileDataResponse,
    ProfileDetailsResponse,
    ProfileResponse,
    RegisterProfileRequest,
    RegisterProfileResponse,
)
from socialscope.application.interfaces.profile_repository import ProfileRepository
from socialscope.application.use_cases.delete_profile import DeleteProfile, DeleteProfileInput
from socialscope.application.use_cases.get_profile_details import (
    GetProfileDetails,
    GetProfileDetailsInput,
)
from socialscope.application.use_cases.register_profile import (
    RegisterProfile,
    RegisterProfileInput,
)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.post("", response_model=RegisterProfileResponse)
async def register_profile(
    body: RegisterProfileRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    use_case: RegisterProfile = Depends(get_register_profile_use_case),
) -> RegisterProfileResponse:
    """Find or create the caller's profile for a handle."""
    result = await use_case.execute(
        RegisterProfileInput(user_id=user_id, platform=body.platform, handle=body.handle)
    )
    response.status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return RegisterProfileResponse(
        profile=ProfileResponse.model_validate(result.profile),
        created=result.created,
    )


@router.get("", response_model=PaginatedProfilesResponse)
async def list_profiles(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    repo: ProfileRepository = Depends(get_profile_repo),
) -> PaginatedProfilesResponse:
    """The caller's profiles, most recently scraped first."""
    profiles, total = await repo.list_for_user(user_id, limit=limit, offset=offset)
    return PaginatedProfilesResponse(
        profiles=[ProfileResponse.model_validate(p) for p in profiles],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{profile_id}", response_model=ProfileDetailsResponse)
async def get_profile(
    profile_id: UUID,
    user_id: str = Depends(get_current_user_id),
    use_case: GetProfileDetails = Depends(get_profile_details_use_case),
) -> ProfileDetailsResponse:
    result = await use_case.execute(GetProfileDetailsInput(profile_id=profile_id, user_id=user_id))
    return ProfileDetailsResponse(
        profile=ProfileResponse.model_validate(result.profile),
        data=ProfileDataResponse.model_validate(result.data) if result.data else None,
    )


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(
    profile_id: UUID,
    user_id: str = Depends(get_current_user_id),
    use_case: DeleteProfile = Depends(get_delete_profile_use_case),
) -> Response:
    await use_case.execute(DeleteProfileInput(profile_id=profile_id, user_id=user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import (
    get_auth_adapter,
    get_current_user,
    get_request_token,
    get_rules,
    get_session_store,
    get_user_repo,
)
from src.api.errors import ValidationFailed
from src.api.schemas import (
    ChangePasswordRequest,
    MessageResponse,
    ProfileUpdateRequest,
    UserResponse,
)
from src.components.auth import (
    INVALID_CREDENTIALS,
    VALIDATION,
    ChangePasswordInput,
    UpdateProfileInput,
    run_change_password,
    run_update_profile,
)
from src.domain.entities import User
from src.domain.validation import FieldError
from src.rules.models import Rules

router = APIRouter()


@router.put("/profile", response_model=UserResponse)
def update_profile(
    req: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    user_repo: Any = Depends(get_user_repo),
) -> UserResponse:
    """Edit company name, business type, web link or logo."""
    result = run_update_profile(
        UpdateProfileInput(user=current_user, changes=req.model_dump(exclude_unset=True)),
        user_repo=user_repo,
    )
    if not result.success or result.user is None:
        if result.error == VALIDATION:
            raise ValidationFailed(result.errors)
        raise HTTPException(status_code=401, detail="Not authenticated")
    return UserResponse.model_validate(result.user)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    req: ChangePasswordRequest,
    token: Annotated[str | None, Depends(get_request_token)],
    current_user: User = Depends(get_current_user),
    user_repo: Any = Depends(get_user_repo),
    auth_adapter: Any = Depends(get_auth_adapter),
    session_store: Any = Depends(get_session_store),
    rules: Rules = Depends(get_rules),
) -> MessageResponse:
    inp = ChangePasswordInput(
        user=current_user,
        current_password=req.current_password,
        new_password=req.new_password,
        keep_token=token,
    )
    result = run_change_password(
        inp,
        user_repo=user_repo,
        auth_adapter=auth_adapter,
        session_store=session_store,
        rules=rules.auth,
    )
    if not result.success:
        if result.error == INVALID_CREDENTIALS:
            raise ValidationFailed(
                [
                    FieldError(
                        path=("currentPassword",),
                        message="Current password is incorrect",
                        code=INVALID_CREDENTIALS,
                    )
                ]
            )
        if result.error == VALIDATION:
            raise ValidationFailed(result.errors)
        raise HTTPException(status_code=401, detail="Not authenticated")
    return MessageResponse(message="Password updated successfully")

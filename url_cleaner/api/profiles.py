"""Profile endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..errors import InputValidationError, ProfileExistsError
from ..logging import get_logger
from ..models import CreateProfileRequest, Profile, ProfileSummary
from ..services import URLCleanerService
from .dependencies import get_service

router = APIRouter(prefix="/api/profiles")
logger = get_logger(__name__)


@router.get("", response_model=List[ProfileSummary])
def list_profiles(service: URLCleanerService = Depends(get_service)):
    return service.list_profiles()


@router.post("", response_model=Profile, status_code=status.HTTP_201_CREATED)
def create_profile(
    request: CreateProfileRequest,
    service: URLCleanerService = Depends(get_service),
):
    try:
        return service.create_profile(request.name)
    except InputValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProfileExistsError as exc:
        raise HTTPException(status_code=409, detail="Profile name already exists") from exc

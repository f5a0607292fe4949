from fastapi import APIRouter, Depends, HTTPException
from redis.exceptions import RedisError

from .. import schemas
from ..deps import get_feature_flags
from ..services.feature_flags import KNOWN_FLAGS, RedisFeatureFlags

router = APIRouter()


@router.get("/flags", response_model=list[schemas.FeatureFlagOut])
def list_flags(flags: RedisFeatureFlags = Depends(get_feature_flags)):
    return [schemas.FeatureFlagOut(name=name, enabled=enabled) for name, enabled in flags.snapshot().items()]


@router.put("/flags/{name}", response_model=schemas.FeatureFlagOut)
def set_flag(
    name: str,
    update: schemas.FeatureFlagUpdate,
    flags: RedisFeatureFlags = Depends(get_feature_flags),
):
    if name not in KNOWN_FLAGS:
        raise HTTPException(status_code=404, detail=f"Unknown flag '{name}'")
    try:
        flags.set_flag(name, update.enabled)
    except RedisError as e:
        raise HTTPException(status_code=503, detail=f"Flag store unavailable: {e}")
    return schemas.FeatureFlagOut(name=name, enabled=flags.is_enabled(name))

"""
Settings Router - API keys from the dashboard's settings form.

Keys are write-only over HTTP: GET reports which providers are configured,
never the key itself.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from tubegrow.ai.providers import ProviderType
from tubegrow.ai.registry import KeyRegistry
from tubegrow.deps import get_key_registry


router = APIRouter(prefix="/settings", tags=["settings"])


class KeyStatusResponse(BaseModel):
    """Example: {"providers": {"gemini": true, "openai": false, "grok": false}}"""
    providers: Dict[str, bool]


class KeyUpdate(BaseModel):
    # None or "" clears the key (and masks any environment default)
    api_key: Optional[str] = Field(default=None, max_length=512)


@router.get("/keys", response_model=KeyStatusResponse)
async def get_key_status(registry: KeyRegistry = Depends(get_key_registry)):
    return KeyStatusResponse(providers=registry.status())


@router.put("/keys/{provider}", response_model=KeyStatusResponse)
async def update_key(
    provider: str,
    body: KeyUpdate,
    registry: KeyRegistry = Depends(get_key_registry),
):
    """Save or clear the key for one provider (gemini, openai, grok)."""
    try:
        provider_type = ProviderType(provider.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "unknown_provider", "message": f"Unknown provider: {provider}"},
        )

    registry.set(provider_type, body.api_key)
    return KeyStatusResponse(providers=registry.status())

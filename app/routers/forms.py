"""Forms provider routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.routers.dependencies import get_form_cache, get_tally_client_factory
from app.schemas.forms import FormListResponse
from app.services.auth import require_user
from app.services.forms import FormCache, TallyClientFactory, list_forms
from app.services.session import Identity

router = APIRouter(prefix="/api/forms", tags=["forms"])


@router.get("", response_model=FormListResponse)
async def list_provider_forms(
    identity: Identity = Depends(require_user),
    session: AsyncSession = Depends(get_session),
    cache: FormCache = Depends(get_form_cache),
    client_factory: TallyClientFactory = Depends(get_tally_client_factory),
) -> FormListResponse:
    """List forms with the caller's key, or the server key as fallback."""
    return await list_forms(
        session,
        identity=identity,
        cache=cache,
        client_factory=client_factory,
    )

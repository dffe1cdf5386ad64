"""Account settings routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models.credential import ApiCredential, Integration
from app.routers.dependencies import commit_session
from app.schemas.settings import ApiKeysResponse, ApiKeysUpdateRequest, KeyStatus
from app.schemas.updates import FieldUpdate, Unchanged, field_update
from app.services.audit import log_event
from app.services.auth import require_user
from app.services.session import Identity
from app.services.vault import (
    apply_credential_updates,
    describe_secret,
    get_credentials,
)

router = APIRouter(prefix="/api/settings", tags=["settings"])

_REQUEST_FIELDS = {
    Integration.TALLY: "tally_api_key",
    Integration.OPENAI: "openai_api_key",
}


def _key_status(
    credentials: ApiCredential | None, integration: Integration
) -> KeyStatus:
    encrypted = credentials.get_secret(integration) if credentials else None
    secret_status = describe_secret(encrypted, integration=integration)
    return KeyStatus(present=secret_status.present, last4=secret_status.last4)


def _keys_response(credentials: ApiCredential | None) -> ApiKeysResponse:
    return ApiKeysResponse(
        tally=_key_status(credentials, Integration.TALLY),
        openai=_key_status(credentials, Integration.OPENAI),
    )


@router.get("/api-keys", response_model=ApiKeysResponse)
async def get_api_keys(
    identity: Identity = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> ApiKeysResponse:
    """Show which provider keys the caller has stored."""
    return _keys_response(await get_credentials(session, identity.email))


@router.put("/api-keys", response_model=ApiKeysResponse)
async def update_api_keys(
    payload: ApiKeysUpdateRequest,
    identity: Identity = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> ApiKeysResponse:
    """Store, replace, or clear the caller's provider keys."""
    updates: dict[Integration, FieldUpdate[str]] = {
        integration: field_update(payload, field)
        for integration, field in _REQUEST_FIELDS.items()
    }
    credentials = await apply_credential_updates(
        session, user_email=identity.email, updates=updates
    )
    await log_event(
        session,
        actor=identity,
        action="api_keys_updated",
        resource_type="api_credentials",
        resource_id=identity.email,
        metadata={
            integration.value: type(update).__name__
            for integration, update in updates.items()
            if not isinstance(update, Unchanged)
        },
    )
    await commit_session(session)
    return _keys_response(credentials)

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, status
from typing import Optional
from careerhub.api.deps import get_community_service, get_message_service
from careerhub.config import get_settings
from careerhub.exceptions import (
    CommunityNotFoundError,
    InvalidCursorError,
    MessageNotFoundError,
    NotPermittedError,
)
from careerhub.guard import require_role
from careerhub.schemas import (
    CommunityCategory,
    CommunityCreate,
    CommunityFilters,
    CommunityMessageRecord,
    CommunityPage,
    CommunityRecord,
    CommunityStatus,
    CommunityUpdate,
    LikeUpdate,
    LogoUpload,
    MessageContent,
    Principal,
    RequiredRole,
)
from careerhub.services.community import CommunityMessageService, CommunityService

router = APIRouter()


@router.get("", response_model=CommunityPage)
async def list_communities(
    status_filter: Optional[CommunityStatus] = Query(None, alias="status"),
    category: Optional[CommunityCategory] = Query(None),
    featured: Optional[bool] = Query(None),
    tag: Optional[str] = Query(None),
    show_deleted: bool = Query(False),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    cursor: Optional[str] = Query(None),
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    filters = CommunityFilters(
        status=status_filter,
        category=category,
        featured=featured,
        tag=tag,
        show_deleted=show_deleted,
    )
    try:
        return await communities.list_communities(
            filters, page_size or get_settings().default_page_size, cursor
        )
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/search", response_model=list[CommunityRecord])
async def search_communities(
    q: str = Query(..., min_length=1),
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    return await communities.search_communities(q)


@router.patch("/messages/{message_id}", response_model=CommunityMessageRecord)
async def update_message(
    message_id: str,
    body: MessageContent,
    messages: CommunityMessageService = Depends(get_message_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await messages.update_message(message_id, body.content, principal)
    except MessageNotFoundError:
        raise HTTPException(status_code=404, detail="Message not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: str,
    messages: CommunityMessageService = Depends(get_message_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        await messages.delete_message(message_id, principal)
    except MessageNotFoundError:
        raise HTTPException(status_code=404, detail="Message not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/{community_id}", response_model=CommunityRecord)
async def get_community(
    community_id: str,
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await communities.get_community(community_id)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")


@router.post("", response_model=CommunityRecord, status_code=status.HTTP_201_CREATED)
async def create_community(
    data: CommunityCreate,
    communities: CommunityService = Depends(get_community_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    return await communities.create_community(data, principal)


@router.patch("/{community_id}", response_model=CommunityRecord)
async def update_community(
    community_id: str,
    patch: CommunityUpdate,
    communities: CommunityService = Depends(get_community_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        await communities.ensure_can_manage(community_id, principal)
        return await communities.update_community(community_id, patch)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.post("/{community_id}/image", response_model=CommunityRecord)
async def upload_image(
    community_id: str,
    file: UploadFile = File(...),
    communities: CommunityService = Depends(get_community_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    image = LogoUpload(
        filename=file.filename or "image",
        content=await file.read(),
        content_type=file.content_type or "application/octet-stream",
    )
    try:
        await communities.ensure_can_manage(community_id, principal)
        return await communities.update_community(community_id, CommunityUpdate(image=image))
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.delete("/{community_id}", response_model=CommunityRecord)
async def delete_community(
    community_id: str,
    communities: CommunityService = Depends(get_community_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        await communities.ensure_can_manage(community_id, principal)
        return await communities.delete_community(community_id, principal.id)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.post("/{community_id}/restore", response_model=CommunityRecord)
async def restore_community(
    community_id: str,
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await communities.restore_community(community_id)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")


@router.delete("/{community_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
async def purge_community(
    community_id: str,
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        await communities.purge_community(community_id)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")


@router.put("/{community_id}/like")
async def set_like(
    community_id: str,
    update: LikeUpdate,
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        likes = await communities.set_like(community_id, update.liked)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")
    return {"likes": likes}


@router.post("/{community_id}/members", response_model=CommunityRecord)
async def join_community(
    community_id: str,
    communities: CommunityService = Depends(get_community_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await communities.set_membership(community_id, principal.id, True)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.delete("/{community_id}/members", response_model=CommunityRecord)
async def leave_community(
    community_id: str,
    communities: CommunityService = Depends(get_community_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await communities.set_membership(community_id, principal.id, False)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")


@router.put("/{community_id}/bans/{user_id}", response_model=CommunityRecord)
async def ban_member(
    community_id: str,
    user_id: str,
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await communities.set_ban(community_id, user_id, True)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")


@router.delete("/{community_id}/bans/{user_id}", response_model=CommunityRecord)
async def unban_member(
    community_id: str,
    user_id: str,
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await communities.set_ban(community_id, user_id, False)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")


@router.get("/{community_id}/messages", response_model=list[CommunityMessageRecord])
async def list_messages(
    community_id: str,
    limit: int = Query(50, ge=1, le=200),
    messages: CommunityMessageService = Depends(get_message_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    return await messages.list_messages(community_id, limit)


@router.post(
    "/{community_id}/messages",
    response_model=CommunityMessageRecord,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    community_id: str,
    body: MessageContent,
    messages: CommunityMessageService = Depends(get_message_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await messages.send_message(community_id, body.content, principal)
    except CommunityNotFoundError:
        raise HTTPException(status_code=404, detail="Community not found")
    except NotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))

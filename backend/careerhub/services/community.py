"""
Community Data Access Service

Communities are discussion spaces with a cover image, membership and a
message thread. Deleting one from the dashboard only marks it deleted; an
admin can restore it or remove it for good.

Operations (CommunityService):
    list_communities      - Filtered, cursor-paginated listing (created_at desc)
    get_community         - Single read with best-effort view counter increment
    create_community      - Insert, author snapshot taken from the principal
    update_community      - Partial update; a replaced image is deleted
    delete_community      - Soft delete (is_deleted, deleted_at, deleted_by)
    restore_community     - Undo a soft delete
    purge_community       - Hard delete with image and messages
    set_like              - likes += 1 / -= 1 (never below zero)
    set_membership        - Join or leave; banned users cannot join
    set_ban               - Ban (also removes membership) or unban
    search_communities    - Whole-collection substring search, deleted excluded
    count_communities     - Non-deleted total for the dashboard

Operations (CommunityMessageService):
    list_messages, send_message, update_message, delete_message
"""

import logging
from typing import Optional

from sqlalchemy import select, update, delete, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.exceptions import (
    CommunityNotFoundError,
    MessageNotFoundError,
    NotPermittedError,
)
from careerhub.middleware.metrics import record_community_view
from careerhub.models import Community, CommunityMessage
from careerhub.models.job import generate_id
from careerhub.schemas import (
    CommunityAuthor,
    CommunityCreate,
    CommunityFilters,
    CommunityMessageRecord,
    CommunityPage,
    CommunityRecord,
    CommunityUpdate,
    LogoUpload,
    Principal,
    Role,
)
from careerhub.schemas.community import DEFAULT_AVATAR
from careerhub.services.pagination import check_page_size, encode_cursor, start_after
from careerhub.services.storage import ObjectStorage, community_image_path
from careerhub.timeutils import Clock, utcnow

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_LIMIT = 50


def has_tag(tag: str):
    """Predicate: the community's JSON ``tags`` array contains ``tag``."""
    tags = func.json_each(Community.tags).table_valued("value")
    return select(tags.c.value).where(tags.c.value == tag).exists()


def matches_text(community: CommunityRecord, needle: str) -> bool:
    fields = [community.title, community.description, community.category]
    if any(needle in value.lower() for value in fields):
        return True
    return any(needle in tag.lower() for tag in community.tags)


def can_manage(principal: Principal, community: Community) -> bool:
    """Admins manage every community; anyone else only the ones they created."""
    return principal.role == Role.ADMIN or principal.id == community.created_by


class CommunityService:
    def __init__(self, db: AsyncSession, storage: ObjectStorage, clock: Clock = utcnow):
        self.db = db
        self.storage = storage
        self.clock = clock

    async def _get_row(self, community_id: str) -> Community:
        result = await self.db.execute(select(Community).where(Community.id == community_id))
        community = result.scalar_one_or_none()
        if community is None:
            raise CommunityNotFoundError(community_id)
        return community

    async def _upload_image(self, community_id: str, image: LogoUpload) -> str:
        path = community_image_path(community_id, image.filename)
        return await self.storage.upload(path, image.content, image.content_type)

    async def _delete_image(self, community_id: str, url: Optional[str]) -> None:
        if not url or not self.storage.owns(url):
            return
        try:
            await self.storage.delete(url)
        except OSError as e:
            logger.warning(f"Error deleting image for community {community_id}: {e}")

    async def ensure_can_manage(self, community_id: str, principal: Principal) -> None:
        """
        Raises:
            CommunityNotFoundError: No community with this id
            NotPermittedError: principal is neither an admin nor the creator
        """
        community = await self._get_row(community_id)
        if not can_manage(principal, community):
            raise NotPermittedError(f"Not allowed to manage community {community_id}")

    async def list_communities(
        self,
        filters: Optional[CommunityFilters] = None,
        page_size: int = 10,
        cursor: Optional[str] = None,
    ) -> CommunityPage:
        """
        List communities newest first.

        Soft-deleted communities are left out unless ``filters.show_deleted``.

        Raises:
            ValueError: page_size is below 1
            InvalidCursorError: cursor is malformed
        """
        check_page_size(page_size)
        filters = filters or CommunityFilters()
        try:
            query = select(Community)

            if not filters.show_deleted:
                query = query.where(Community.is_deleted.is_(False))
            if filters.status:
                query = query.where(Community.status == filters.status)
            if filters.category:
                query = query.where(Community.category == filters.category)
            if filters.featured is not None:
                query = query.where(Community.featured == filters.featured)
            if filters.tag:
                query = query.where(has_tag(filters.tag))

            if cursor:
                query = query.where(start_after(Community.created_at, Community.id, cursor))

            query = query.order_by(
                Community.created_at.desc(), Community.id.desc()
            ).limit(page_size)

            result = await self.db.execute(query)
            communities = [CommunityRecord.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting communities: {e}")
            raise

        next_cursor = (
            encode_cursor(communities[-1].created_at, communities[-1].id) if communities else None
        )
        return CommunityPage(
            communities=communities, cursor=next_cursor, has_more=len(communities) == page_size
        )

    async def get_community(self, community_id: str) -> CommunityRecord:
        """
        Fetch one community and bump its view counter.

        As with jobs, the increment is best-effort and the returned record
        is the one read before it.

        Raises:
            CommunityNotFoundError: No community with this id
        """
        try:
            record = CommunityRecord.model_validate(await self._get_row(community_id))
        except Exception as e:
            logger.error(f"Error getting community {community_id}: {e}")
            raise

        try:
            await self.db.execute(
                update(Community)
                .where(Community.id == community_id)
                .values(views=Community.views + 1)
            )
            await self.db.commit()
            record_community_view()
        except Exception as e:
            logger.warning(f"Failed to update view count for community {community_id}: {e}")
            await self.db.rollback()

        return record

    async def create_community(self, data: CommunityCreate, author: Principal) -> CommunityRecord:
        """
        Create a community owned by ``author``.

        The author becomes the first member. An uploaded image is stored
        under ``community-images/{id}/{filename}``.
        """
        uploaded = None
        try:
            community_id = generate_id()

            image_url = data.image
            if isinstance(data.image, LogoUpload):
                image_url = uploaded = await self._upload_image(community_id, data.image)

            snapshot = CommunityAuthor(
                id=author.id,
                name=author.name,
                avatar=author.avatar or DEFAULT_AVATAR,
                role=author.role.value,
            )

            community = Community(
                id=community_id,
                title=data.title,
                description=data.description,
                image=image_url or None,
                category=data.category,
                tags=data.tags,
                status=data.status,
                featured=data.featured,
                pinned=data.pinned,
                likes=0,
                comments=0,
                views=0,
                members=[author.id],
                banned_members=[],
                author=snapshot.model_dump(),
                created_by=author.id,
                created_at=self.clock(),
                is_deleted=False,
            )
            self.db.add(community)
            await self.db.commit()
            await self.db.refresh(community)
        except Exception as e:
            logger.error(f"Error creating community: {e}")
            await self.db.rollback()
            if uploaded:
                await self._delete_image(community_id, uploaded)
            raise

        logger.info(f"Created community {community_id}: {data.title}")
        return CommunityRecord.model_validate(community)

    async def update_community(
        self, community_id: str, patch: CommunityUpdate
    ) -> CommunityRecord:
        """
        Apply a partial update and stamp ``updated_at``.

        When the image changes, the previous one is deleted from storage
        once the new record is committed.

        Raises:
            CommunityNotFoundError: No community with this id
        """
        uploaded = None
        replaced = None
        try:
            community = await self._get_row(community_id)
            data = patch.model_dump(exclude_unset=True)

            if "image" in data:
                if isinstance(patch.image, LogoUpload):
                    data["image"] = uploaded = await self._upload_image(
                        community_id, patch.image
                    )
                else:
                    data["image"] = patch.image or None
                if community.image and community.image != data["image"]:
                    replaced = community.image

            for field, value in data.items():
                setattr(community, field, value)
            community.updated_at = self.clock()

            await self.db.commit()
            await self.db.refresh(community)
        except Exception as e:
            logger.error(f"Error updating community {community_id}: {e}")
            await self.db.rollback()
            if uploaded:
                await self._delete_image(community_id, uploaded)
            raise

        await self._delete_image(community_id, replaced)
        return CommunityRecord.model_validate(community)

    async def delete_community(self, community_id: str, deleted_by: str) -> CommunityRecord:
        """Soft delete. The row, its image and its messages are kept."""
        try:
            community = await self._get_row(community_id)
            community.is_deleted = True
            community.deleted_at = self.clock()
            community.deleted_by = deleted_by
            await self.db.commit()
            await self.db.refresh(community)
        except Exception as e:
            logger.error(f"Error deleting community {community_id}: {e}")
            raise

        logger.info(f"Community {community_id} deleted by {deleted_by}")
        return CommunityRecord.model_validate(community)

    async def restore_community(self, community_id: str) -> CommunityRecord:
        try:
            community = await self._get_row(community_id)
            community.is_deleted = False
            community.restored_at = self.clock()
            community.deleted_at = None
            community.deleted_by = None
            await self.db.commit()
            await self.db.refresh(community)
        except Exception as e:
            logger.error(f"Error restoring community {community_id}: {e}")
            raise

        return CommunityRecord.model_validate(community)

    async def purge_community(self, community_id: str) -> None:
        """
        Remove a community for good, together with its messages and image.

        Raises:
            CommunityNotFoundError: No community with this id
        """
        try:
            community = await self._get_row(community_id)
            image_url = community.image

            await self.db.execute(
                delete(CommunityMessage).where(CommunityMessage.community_id == community_id)
            )
            await self.db.delete(community)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error permanently deleting community {community_id}: {e}")
            raise

        await self._delete_image(community_id, image_url)
        logger.info(f"Permanently deleted community {community_id}")

    async def set_like(self, community_id: str, liked: bool) -> int:
        """
        Add or withdraw one like and return the new count.

        Raises:
            CommunityNotFoundError: No community with this id
        """
        if liked:
            likes = Community.likes + 1
        else:
            likes = case((Community.likes > 0, Community.likes - 1), else_=0)

        try:
            result = await self.db.execute(
                update(Community).where(Community.id == community_id).values(likes=likes)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise CommunityNotFoundError(community_id)
            await self.db.commit()

            count = await self.db.execute(
                select(Community.likes).where(Community.id == community_id)
            )
            return count.scalar_one()
        except Exception as e:
            logger.error(f"Error toggling like for community {community_id}: {e}")
            raise

    async def set_membership(
        self, community_id: str, user_id: str, joining: bool
    ) -> CommunityRecord:
        """
        Add ``user_id`` to, or remove it from, the member list.

        Raises:
            CommunityNotFoundError: No community with this id
            NotPermittedError: A banned user tried to join
        """
        try:
            community = await self._get_row(community_id)
            members = list(community.members or [])

            if joining:
                if user_id in (community.banned_members or []):
                    raise NotPermittedError(f"User {user_id} is banned from this community")
                if user_id not in members:
                    members.append(user_id)
            elif user_id in members:
                members.remove(user_id)

            community.members = members
            await self.db.commit()
            await self.db.refresh(community)
        except Exception as e:
            logger.error(f"Error updating membership of community {community_id}: {e}")
            raise

        return CommunityRecord.model_validate(community)

    async def set_ban(self, community_id: str, user_id: str, banning: bool) -> CommunityRecord:
        """Ban (which also drops membership) or unban ``user_id``."""
        try:
            community = await self._get_row(community_id)
            banned = list(community.banned_members or [])

            if banning:
                if user_id not in banned:
                    banned.append(user_id)
                community.members = [m for m in community.members or [] if m != user_id]
            elif user_id in banned:
                banned.remove(user_id)

            community.banned_members = banned
            await self.db.commit()
            await self.db.refresh(community)
        except Exception as e:
            logger.error(f"Error updating bans of community {community_id}: {e}")
            raise

        return CommunityRecord.model_validate(community)

    async def search_communities(self, text: str) -> list[CommunityRecord]:
        """
        Case-insensitive substring search over non-deleted communities.

        Matches title, description, category and tags; title matches first.
        """
        needle = text.lower()
        try:
            result = await self.db.execute(
                select(Community)
                .where(Community.is_deleted.is_(False))
                .order_by(Community.created_at.desc())
            )
            communities = [CommunityRecord.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error searching communities: {e}")
            raise

        matches = [c for c in communities if matches_text(c, needle)]
        return sorted(matches, key=lambda c: needle not in c.title.lower())

    async def count_communities(self) -> int:
        result = await self.db.execute(
            select(func.count(Community.id)).where(Community.is_deleted.is_(False))
        )
        return result.scalar_one() or 0


class CommunityMessageService:
    """
    Chat messages inside a community.

    Editing or deleting a message is allowed for its sender, an admin, or
    the community's creator.
    """

    def __init__(self, db: AsyncSession, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    async def _get_community(self, community_id: str) -> Community:
        result = await self.db.execute(select(Community).where(Community.id == community_id))
        community = result.scalar_one_or_none()
        if community is None or community.is_deleted:
            raise CommunityNotFoundError(community_id)
        return community

    async def _get_editable(self, message_id: str, principal: Principal) -> CommunityMessage:
        result = await self.db.execute(
            select(CommunityMessage).where(CommunityMessage.id == message_id)
        )
        message = result.scalar_one_or_none()
        if message is None:
            raise MessageNotFoundError(message_id)

        if principal.role == Role.ADMIN or principal.id == message.user_id:
            return message

        owner = await self.db.execute(
            select(Community.created_by).where(Community.id == message.community_id)
        )
        if owner.scalar_one_or_none() == principal.id:
            return message

        raise NotPermittedError(f"Not allowed to change message {message_id}")

    async def list_messages(
        self, community_id: str, limit: int = DEFAULT_MESSAGE_LIMIT
    ) -> list[CommunityMessageRecord]:
        """Oldest first, at most ``limit`` messages."""
        check_page_size(limit)
        try:
            result = await self.db.execute(
                select(CommunityMessage)
                .where(CommunityMessage.community_id == community_id)
                .order_by(CommunityMessage.created_at, CommunityMessage.id)
                .limit(limit)
            )
            return [CommunityMessageRecord.model_validate(m) for m in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting messages for community {community_id}: {e}")
            raise

    async def send_message(
        self, community_id: str, content: str, sender: Principal
    ) -> CommunityMessageRecord:
        """
        Post a message as ``sender``.

        Raises:
            CommunityNotFoundError: Community missing or deleted
            NotPermittedError: Sender is banned from the community
        """
        try:
            community = await self._get_community(community_id)
            if sender.id in (community.banned_members or []):
                raise NotPermittedError(f"User {sender.id} is banned from this community")

            message = CommunityMessage(
                community_id=community_id,
                user_id=sender.id,
                user_name=sender.name,
                user_photo=sender.avatar,
                content=content,
                created_at=self.clock(),
            )
            self.db.add(message)
            community.comments = (community.comments or 0) + 1
            await self.db.commit()
            await self.db.refresh(message)
        except Exception as e:
            logger.error(f"Error sending message to community {community_id}: {e}")
            await self.db.rollback()
            raise

        return CommunityMessageRecord.model_validate(message)

    async def update_message(
        self, message_id: str, content: str, editor: Principal
    ) -> CommunityMessageRecord:
        try:
            message = await self._get_editable(message_id, editor)
            message.content = content
            message.updated_at = self.clock()
            await self.db.commit()
            await self.db.refresh(message)
        except Exception as e:
            logger.error(f"Error updating message {message_id}: {e}")
            raise

        return CommunityMessageRecord.model_validate(message)

    async def delete_message(self, message_id: str, actor: Principal) -> None:
        try:
            message = await self._get_editable(message_id, actor)
            await self.db.delete(message)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error deleting message {message_id}: {e}")
            raise

"""
User account business logic.

Registration, profile/email/password updates, account deletion and avatar
upload. Credential-gated operations lock the user row they verify for the
rest of their transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

import structlog

from wls.auth.password import HashMismatchError
from wls.db.models import User
from wls.errors import AlreadyUsedError, IncorrectCredentialError, NotFoundError, SameValueError
from wls.repo.errors import NoRecordError
from wls.repo.patches import UserPatch
from wls.storage.blob import PutOptions

if TYPE_CHECKING:
    from wls.auth.password import Hasher
    from wls.config import Settings
    from wls.repo import Repository, RepositoryTx
    from wls.storage.blob import BlobStorage
    from wls.users.schemas import (
        UserCreateRequest,
        UserDeleteRequest,
        UserEmailUpdateRequest,
        UserPasswordUpdateRequest,
        UserUpdateRequest,
    )

logger = structlog.get_logger()


class UserService:
    def __init__(self, repo: RepositoryTx, hasher: Hasher, storage: BlobStorage, settings: Settings) -> None:
        self.repo = repo
        self.hasher = hasher
        self.storage = storage
        self.settings = settings

    async def get(self, user_id: int) -> User:
        try:
            return await self.repo.user_get(user_id)
        except NoRecordError:
            msg = "user not found"
            raise NotFoundError(msg) from None

    # ---------------------------------------------------------------------------
    # Registration
    # ---------------------------------------------------------------------------

    async def create(self, req: UserCreateRequest) -> int:
        """
        Register a new user.

        Raises:
            AlreadyUsedError: If the email is already registered.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                await tx.user_get_by_email(req.email)
            except NoRecordError:
                pass
            else:
                msg = "email already used"
                raise AlreadyUsedError(msg)

            user = await tx.user_create(
                User(
                    email=req.email,
                    password_hash=self.hasher.hash(req.password),
                    first_name=req.first_name,
                    last_name=req.last_name,
                    bio=req.bio,
                    birthdate=req.birthdate,
                )
            )

        logger.info("user_created", user_id=user.id)
        return user.id

    # ---------------------------------------------------------------------------
    # Updates
    # ---------------------------------------------------------------------------

    async def update(self, user_id: int, req: UserUpdateRequest) -> None:
        """Write the profile fields present in ``req``."""
        patch = UserPatch(**req.model_dump(exclude_unset=True))
        try:
            await self.repo.user_update(user_id, patch)
        except NoRecordError:
            msg = "user not found"
            raise NotFoundError(msg) from None
        logger.info("user_updated", user_id=user_id, fields=sorted(patch.to_columns()))

    async def update_email(self, user_id: int, req: UserEmailUpdateRequest) -> None:
        """
        Change the user's email.

        Raises:
            AlreadyUsedError: If another user already has the email.
            NotFoundError: If the user does not exist.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                owner = await tx.user_get_by_email(req.email)
            except NoRecordError:
                pass
            else:
                if owner.id != user_id:
                    msg = "email already used"
                    raise AlreadyUsedError(msg)

            try:
                await tx.user_update(user_id, UserPatch(email=req.email))
            except NoRecordError:
                msg = "user not found"
                raise NotFoundError(msg) from None

        logger.info("user_email_updated", user_id=user_id)

    async def update_password(self, user_id: int, req: UserPasswordUpdateRequest) -> None:
        """
        Replace the user's password after verifying the current one.

        Raises:
            SameValueError: If the new password equals the current one. Checked
                before any row is read.
            NotFoundError: If the user does not exist.
            IncorrectCredentialError: If the current password does not match.
        """
        if req.new_password == req.current_password:
            msg = "new password is the same as the current one"
            raise SameValueError(msg)

        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            user = await self._get_verified(tx, user_id, req.current_password)
            await tx.user_update(user.id, UserPatch(password_hash=self.hasher.hash(req.new_password)))

        logger.info("user_password_updated", user_id=user_id)

    async def delete(self, user_id: int, req: UserDeleteRequest) -> None:
        """
        Delete the account after verifying its password.

        Raises:
            NotFoundError: If the user does not exist.
            IncorrectCredentialError: If the password does not match.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            await self._get_verified(tx, user_id, req.password)
            await tx.user_delete(user_id)

        logger.info("user_deleted", user_id=user_id)

    async def _get_verified(self, tx: Repository, user_id: int, password: str) -> User:
        try:
            user = await tx.user_get(user_id, lock=True)
        except NoRecordError:
            msg = "user not found"
            raise NotFoundError(msg) from None
        try:
            self.hasher.compare(user.password_hash, password)
        except HashMismatchError:
            msg = "incorrect password"
            raise IncorrectCredentialError(msg) from None
        return user

    # ---------------------------------------------------------------------------
    # Avatar
    # ---------------------------------------------------------------------------

    def avatar_options(self, user_id: int, content_type: str, size: int) -> PutOptions:
        return PutOptions(
            bucket=self.settings.storage_bucket,
            category=self.settings.storage_category_user,
            category_id=user_id,
            filename=self.settings.storage_filename_user,
            content_type=content_type,
            size=size,
        )

    async def put_avatar(self, user_id: int, stream: BinaryIO, options: PutOptions) -> str:
        """
        Store the avatar blob, then point the user's profile at it.

        The blob is written first and is not removed if the profile update
        fails.

        Returns:
            The avatar URI.
        """
        uri = await self.storage.put(stream, options)
        try:
            await self.repo.user_update(user_id, UserPatch(avatar=uri))
        except NoRecordError:
            logger.warning("orphaned_blob", uri=uri, user_id=user_id)
            msg = "user not found"
            raise NotFoundError(msg) from None
        except BaseException as exc:
            logger.warning("orphaned_blob", uri=uri, user_id=user_id, error=type(exc).__name__)
            raise
        logger.info("user_avatar_updated", user_id=user_id, uri=uri)
        return uri

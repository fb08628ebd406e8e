# =============================================================================
# core/services/media_lifecycle.py - Media Ownership / Lifecycle Coordinator
# =============================================================================
# Sequences uploads and deletions around entity writes:
#
#   create:  validate -> upload -> insert entity
#   replace: capture old ref -> upload new -> persist entity -> delete old
#   delete:  resolve handle -> delete remote (best effort) -> delete entity
#
# Rules:
# - An entity is never written with media the store hasn't confirmed.
# - The old asset is deleted only after the record pointing at the new one
#   has been saved.
# - Remote deletion failures are logged and swallowed; they never fail or
#   roll back the entity write. Deletions are still awaited before returning.
# - The local placeholder asset is never sent to the remote store.
# - If the entity write fails after an upload, the uploaded asset is left in
#   the store (logged, not retried).
# =============================================================================

import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping, TypeVar
from urllib.parse import urlsplit

from app.exceptions import EntityNotFoundError
from core.models.entities import ASSET_CLASS_FOLDERS, MEDIA_BINDINGS, EntityKind
from core.models.media import (
    AssetClass,
    AssetLifecycle,
    AssetReference,
    AssetState,
    DeletionOutcome,
    PendingUpload,
    UploadPolicy,
)
from core.services.asset_store import AssetStore
from core.services.entity_store import EntityStore
from core.services.upload_gateway import DEFAULT_UPLOAD_POLICIES, validate
from lib.asset_urls import derive_handle, infer_resource_type

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MediaLifecycleCoordinator:
    """
    Binds uploaded assets to domain entities.

    Constructed once at process start with explicit collaborators and
    configuration (see app/dependencies.py).

    Example:
        coordinator = MediaLifecycleCoordinator(
            asset_store=InMemoryAssetStore(),
            entity_store=InMemoryEntityStore(),
            namespace="patwa_toli",
            placeholder_urls=["/uploads/profile-pics/default_avatar.png"],
        )
        post = await coordinator.create_with_media(EntityKind.POST, {"content": "hi"}, upload)
    """

    def __init__(
        self,
        asset_store: AssetStore,
        entity_store: EntityStore,
        policies: Mapping[AssetClass, UploadPolicy] = DEFAULT_UPLOAD_POLICIES,
        namespace: str = "patwa_toli",
        placeholder_urls: Iterable[str] = (),
    ):
        self.asset_store = asset_store
        self.entity_store = entity_store
        self.policies = dict(policies)
        self.namespace = namespace.strip("/")
        self.placeholder_urls = frozenset(placeholder_urls)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def folder_for(self, asset_class: AssetClass) -> str:
        """Remote folder for an asset class, e.g. "patwa_toli/posts"."""
        return f"{self.namespace}/{ASSET_CLASS_FOLDERS[asset_class]}"

    def is_placeholder(self, ref: AssetReference | None) -> bool:
        """True when `ref` points at a locally served default asset."""
        if ref is None:
            return False
        if ref.url in self.placeholder_urls:
            return True
        try:
            return urlsplit(ref.url).path in self.placeholder_urls
        except ValueError:
            return False

    @staticmethod
    def _same_asset(a: AssetReference | None, b: AssetReference | None) -> bool:
        if a is None or b is None:
            return False
        return a.url == b.url or bool(a.handle and a.handle == b.handle)

    @staticmethod
    def _transition(lifecycle: AssetLifecycle, state: AssetState, label: str) -> None:
        previous = lifecycle.state
        lifecycle.advance(state)
        logger.debug(f"Asset {label}: {previous.value} -> {state.value}")

    # -------------------------------------------------------------------------
    # Asset-level operations
    # -------------------------------------------------------------------------

    async def validate_and_upload(
        self,
        upload: PendingUpload,
        asset_class: AssetClass,
    ) -> AssetReference:
        """
        Validate an upload against its class policy, then push it to the store.

        Raises:
            UnsupportedMediaTypeError / PayloadTooLargeError: Before any network call
            UploadFailedError: If the store rejects or can't be reached
        """
        validate(upload, self.policies[asset_class])
        ref = await self.asset_store.upload(
            upload.buffer,
            upload.extension,
            self.folder_for(asset_class),
        )
        logger.info(f"Uploaded {asset_class.value} {upload.original_name!r} as {ref.handle}")
        return ref

    async def replace_asset(
        self,
        old_ref: AssetReference | None,
        upload: PendingUpload,
        asset_class: AssetClass,
        persist: Callable[[AssetReference], Awaitable[Any]],
    ) -> AssetReference:
        """
        Upload new media, persist it through `persist`, then release the old asset.

        `persist` receives the new reference and must durably save the record
        that points at it. If it raises, the error propagates and the old
        asset is kept.
        """
        old_lifecycle = AssetLifecycle(AssetState.ATTACHED if old_ref else AssetState.NONE)
        new_lifecycle = AssetLifecycle()
        if old_ref is not None:
            self._transition(old_lifecycle, AssetState.REPLACING, old_ref.url)

        self._transition(new_lifecycle, AssetState.UPLOADING, upload.original_name or "upload")
        try:
            new_ref = await self.validate_and_upload(upload, asset_class)
        except Exception:
            self._transition(new_lifecycle, AssetState.GONE, upload.original_name or "upload")
            if old_ref is not None:
                self._transition(old_lifecycle, AssetState.ATTACHED, old_ref.url)
            raise

        try:
            await persist(new_ref)
        except Exception:
            logger.warning(
                f"Record update failed after upload; {new_ref.handle} is orphaned in the remote store"
            )
            self._transition(new_lifecycle, AssetState.GONE, new_ref.url)
            if old_ref is not None:
                self._transition(old_lifecycle, AssetState.ATTACHED, old_ref.url)
            raise
        self._transition(new_lifecycle, AssetState.ATTACHED, new_ref.url)

        if old_ref is not None and not self._same_asset(old_ref, new_ref):
            self._transition(old_lifecycle, AssetState.DETACHING, old_ref.url)
            await self.release_asset(old_ref)
            self._transition(old_lifecycle, AssetState.GONE, old_ref.url)

        return new_ref

    async def release_asset(self, ref: AssetReference | None) -> DeletionOutcome:
        """
        Best-effort removal of a remote asset. Never raises.

        Skips the placeholder and references whose handle can't be derived.
        """
        if ref is None:
            return DeletionOutcome.SKIPPED

        if self.is_placeholder(ref):
            logger.debug(f"Not deleting placeholder asset: {ref.url}")
            return DeletionOutcome.SKIPPED

        handle = ref.handle or derive_handle(ref.url)
        if not handle:
            logger.warning(f"Could not determine handle for {ref.url}; manual cleanup might be needed")
            return DeletionOutcome.SKIPPED

        resource_type = ref.resource_type or infer_resource_type(ref.url)

        try:
            outcome = await self.asset_store.delete(handle, resource_type)
        except Exception as e:
            logger.error(f"Non-fatal: failed to delete remote asset {handle}: {e}")
            return DeletionOutcome.FAILED

        logger.info(f"Released remote asset {handle}: {outcome.value}")
        return outcome

    # -------------------------------------------------------------------------
    # Entity-level operations
    # -------------------------------------------------------------------------

    async def create_with_media(
        self,
        kind: EntityKind,
        data: dict[str, Any],
        upload: PendingUpload | None = None,
    ) -> dict[str, Any]:
        """
        Create an entity, uploading its media first when one is given.

        The entity is never inserted if validation or upload fails.
        """
        binding = MEDIA_BINDINGS[kind]
        fields = dict(data)
        lifecycle = AssetLifecycle()
        ref = None

        if upload is not None:
            self._transition(lifecycle, AssetState.UPLOADING, upload.original_name or "upload")
            try:
                ref = await self.validate_and_upload(upload, binding.asset_class)
            except Exception:
                self._transition(lifecycle, AssetState.GONE, upload.original_name or "upload")
                raise
            fields.update(binding.fields_for(ref, upload.media_kind))

        try:
            row = await self.entity_store.insert(kind, fields)
        except Exception:
            if ref is not None:
                logger.warning(f"Creating {kind.value} failed after upload; {ref.handle} is orphaned")
                self._transition(lifecycle, AssetState.GONE, ref.url)
            raise

        if ref is not None:
            self._transition(lifecycle, AssetState.ATTACHED, ref.url)
        return row

    async def replace_entity_media(
        self,
        kind: EntityKind,
        row: dict[str, Any],
        upload: PendingUpload | None,
        fields: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Update an entity, swapping its media when `upload` is given.

        `row` is the current record (already fetched and authorized by the
        caller). Other `fields` are written in the same update as the new
        media reference.
        """
        binding = MEDIA_BINDINGS[kind]
        entity_id = str(row["id"])
        updates = dict(fields or {})

        if upload is None:
            if not updates:
                return row
            return await self._update(kind, entity_id, updates)

        saved: dict[str, Any] = {}

        async def persist(new_ref: AssetReference) -> None:
            saved.update(
                await self._update(kind, entity_id, {**updates, **binding.fields_for(new_ref, upload.media_kind)})
            )

        await self.replace_asset(binding.reference_of(row), upload, binding.asset_class, persist)
        return saved

    async def delete_entity_with_media(
        self,
        kind: EntityKind,
        row: dict[str, Any],
    ) -> DeletionOutcome:
        """
        Release the entity's media (best effort) and delete the record.

        The record is deleted whatever the remote outcome was.
        """
        ref = MEDIA_BINDINGS[kind].reference_of(row)
        outcome = await self.release_asset(ref)
        if ref is not None and outcome is DeletionOutcome.FAILED:
            logger.warning(f"Deleting {kind.value} {row['id']} although its media could not be removed")

        await self.entity_store.delete(kind, str(row["id"]))
        return outcome

    async def _update(self, kind: EntityKind, entity_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        updated = await self.entity_store.update_fields(kind, entity_id, fields)
        if updated is None:
            raise EntityNotFoundError(kind.value, entity_id)
        return updated

"""Claim store persisting JSON documents through SQLAlchemy."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tfclaim.adapters.manifest import claim_to_document, parse_claim_document
from tfclaim.adapters.patch import MergePatchHandle, merge_into_stored
from tfclaim.adapters.sqlalchemy.engine import session_factory as default_session_factory
from tfclaim.adapters.sqlalchemy.mappings import claim_table
from tfclaim.domain.model import NamespacedName
from tfclaim.domain.reconcile.errors import AlreadyExistsError, NotFoundError, TransientError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

    from tfclaim.domain.model import ClaimResource

log = logging.getLogger(__name__)


def _key_filter(key: NamespacedName) -> tuple[Any, ...]:
    return (claim_table.c.namespace == key.namespace, claim_table.c.name == key.name)


class SqlAlchemyClaimStore:
    """Claim store backed by the ``claim`` table.

    Every call runs in its own short transaction; driver failures surface as
    ``TransientError`` so callers can retry on their own schedule.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or default_session_factory()

    def get(self, key: NamespacedName) -> ClaimResource:
        try:
            with self.session_factory() as session:
                document = session.execute(
                    select(claim_table.c.document).where(*_key_filter(key))
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise TransientError(f"Failed to load claim {key}: {exc}") from exc
        if document is None:
            raise NotFoundError(key)
        try:
            return parse_claim_document(document)
        except ValidationError as exc:
            raise TransientError(f"Stored claim {key} is not a valid document: {exc}") from exc

    def begin_patch(self, resource: ClaimResource) -> MergePatchHandle:
        return MergePatchHandle(resource.key, claim_to_document(resource), self.patch)

    def create(self, resource: ClaimResource) -> ClaimResource:
        created = resource.deep_copy()
        now = datetime.now(tz=UTC)
        created.metadata.uid = created.metadata.uid or str(uuid.uuid4())
        created.metadata.resource_version = 1
        created.metadata.creation_timestamp = created.metadata.creation_timestamp or now
        try:
            with self.session_factory() as session, session.begin():
                session.execute(
                    insert(claim_table).values(
                        namespace=created.metadata.namespace,
                        name=created.metadata.name,
                        uid=created.metadata.uid,
                        resource_version=1,
                        document=claim_to_document(created),
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as exc:
            raise AlreadyExistsError(created.key) from exc
        except SQLAlchemyError as exc:
            raise TransientError(f"Failed to create claim {created.key}: {exc}") from exc
        log.info("Created claim %s", created.key)
        return created

    def patch(self, key: NamespacedName, patch: dict[str, Any]) -> ClaimResource:
        try:
            with self.session_factory() as session, session.begin():
                current = session.execute(
                    select(claim_table.c.document).where(*_key_filter(key)).with_for_update()
                ).scalar_one_or_none()
                if current is None:
                    raise NotFoundError(key)
                merged = merge_into_stored(current, patch)
                try:
                    resource = parse_claim_document(merged)
                except ValidationError as exc:
                    raise TransientError(
                        f"Patch produced an invalid claim {key}: {exc}"
                    ) from exc
                session.execute(
                    update(claim_table)
                    .where(*_key_filter(key))
                    .values(
                        document=merged,
                        resource_version=resource.metadata.resource_version,
                        updated_at=datetime.now(tz=UTC),
                    )
                )
        except SQLAlchemyError as exc:
            raise TransientError(f"Failed to patch claim {key}: {exc}") from exc
        return resource

    def delete(self, key: NamespacedName) -> None:
        try:
            with self.session_factory() as session, session.begin():
                result = session.execute(delete(claim_table).where(*_key_filter(key)))
        except SQLAlchemyError as exc:
            raise TransientError(f"Failed to delete claim {key}: {exc}") from exc
        if result.rowcount == 0:
            raise NotFoundError(key)
        log.info("Deleted claim %s", key)

    def list_keys(self) -> list[NamespacedName]:
        try:
            with self.session_factory() as session:
                rows = session.execute(
                    select(claim_table.c.namespace, claim_table.c.name).order_by(
                        claim_table.c.namespace, claim_table.c.name
                    )
                ).all()
        except SQLAlchemyError as exc:
            raise TransientError(f"Failed to list claims: {exc}") from exc
        return [NamespacedName(namespace=row.namespace, name=row.name) for row in rows]

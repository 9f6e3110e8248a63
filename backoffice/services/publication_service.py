"""
Publication Service - products/services into catalog sections

Every operation is one transaction:
1. Validate item and section ids (all-or-nothing)
2. Resolve the pairs to add/remove against persisted mappings
3. Append/remove/replace mappings keeping positions dense per section
4. Recompute is_published for every affected item
5. Commit, or roll back on any failure

Validation problems come back as an unsuccessful PublicationResult; database
failures roll back and raise PublicationFailed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from backoffice.events import MappingChange, MappingFailure, emit_event
from backoffice.exceptions import AuthenticationRequired, EmptySelectionError, PublicationFailed
from backoffice.services.entity_validator import require_ids, unique_ids, validate_containers, validate_items
from backoffice.services.mapping_resolver import cross_pairs, resolve_mappings, select_existing, split_existing
from backoffice.services.ordered_mutator import (
    append_mappings,
    current_pairs,
    lock_containers,
    recompute_published_flags,
    remove_mappings,
    replace_container,
)
from backoffice.services.publication_kinds import PublicationKind

logger = logging.getLogger(__name__)


@dataclass
class PublicationResult:
    success: bool
    message: str
    added: int = 0
    removed: int = 0
    updated: int = 0
    invalid_ids: List[int] = field(default_factory=list)


_ACTION_VERBS = {
    "publish": "publish",
    "unpublish": "unpublish",
    "mappings": "update section",
    "item_sections": "update sections for",
}


def _join(ids: Sequence[int]) -> str:
    return ", ".join(str(i) for i in ids)


def require_publisher(publisher_id: Optional[str]) -> str:
    """Writes that create mappings must name who published them."""
    if not publisher_id:
        raise AuthenticationRequired("User authentication required for publication")
    return publisher_id


class PublicationService:
    """Transaction coordinator for one publication kind"""

    def __init__(self, session: Session, kind: PublicationKind):
        self.session = session
        self.kind = kind

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def publish(
        self, item_ids: Sequence[int], section_ids: Sequence[int], publisher_id: Optional[str] = None
    ) -> PublicationResult:
        """Publish every item into every section; re-publishing a pair is a no-op counted as updated."""
        kind = self.kind

        def work() -> PublicationResult:
            require_ids(item_ids, f"{kind.name}_ids")
            require_ids(section_ids, "section_ids")
            require_publisher(publisher_id)
            items = validate_items(self.session, kind, item_ids)
            if items.rejected:
                return self._reject(f"Some {kind.plural} do not exist", items.rejected)
            if items.ineligible:
                return self._reject(f"Some {kind.plural} are not active", items.ineligible)

            sections = validate_containers(self.session, section_ids)
            if sections.rejected:
                return self._reject("Some sections do not exist", sections.rejected)

            lock_containers(self.session, sections.existing)
            requested = cross_pairs(items.existing, sections.existing)
            delta = split_existing(
                requested, current_pairs(self.session, kind, items.existing, sections.existing)
            )
            append_mappings(self.session, kind, delta.to_add, publisher_id)
            recompute_published_flags(self.session, kind, items.existing)

            return PublicationResult(
                success=True,
                message=f"{kind.plural.capitalize()} published successfully",
                added=len(delta.to_add),
                updated=len(delta.unchanged),
            )

        return self._run("publish", item_ids, section_ids, work, publisher_id=publisher_id)

    def unpublish(self, item_ids: Sequence[int], section_ids: Sequence[int]) -> PublicationResult:
        """Remove the exact (item, section) pairs and compact the affected sections."""
        kind = self.kind

        def work() -> PublicationResult:
            require_ids(item_ids, f"{kind.name}_ids")
            require_ids(section_ids, "section_ids")
            items = validate_items(self.session, kind, item_ids)
            if items.rejected:
                return self._reject(f"Some {kind.plural} do not exist", items.rejected)

            sections = validate_containers(self.session, section_ids)
            if sections.rejected:
                return self._reject("Some sections do not exist", sections.rejected)

            lock_containers(self.session, sections.existing)
            requested = cross_pairs(items.existing, sections.existing)
            delta = select_existing(
                requested, current_pairs(self.session, kind, items.existing, sections.existing)
            )
            removed = remove_mappings(self.session, kind, delta.to_remove)
            recompute_published_flags(self.session, kind, items.existing)

            return PublicationResult(
                success=True,
                message=f"{kind.plural.capitalize()} unpublished successfully",
                removed=removed,
            )

        return self._run("unpublish", item_ids, section_ids, work)

    def update_container_mappings(
        self, section_id: int, item_ids: Sequence[int], publisher_id: Optional[str] = None
    ) -> PublicationResult:
        """
        Replace one section's ordered list with exactly item_ids.

        An empty list clears the section. Items new to the section must be
        eligible; items already published there stay even if they no longer are.
        """
        kind = self.kind
        desired_items = unique_ids(item_ids or [])

        def work() -> PublicationResult:
            require_publisher(publisher_id)
            sections = validate_containers(self.session, [section_id])
            if sections.rejected:
                return self._reject("Some sections do not exist", sections.rejected)

            lock_containers(self.session, [section_id])
            current = current_pairs(self.session, kind, section_ids=[section_id])
            delta = resolve_mappings(cross_pairs(desired_items, [section_id]), current)

            if desired_items:
                items = validate_items(self.session, kind, desired_items)
                if items.rejected:
                    return self._reject(f"Some {kind.plural} do not exist", items.rejected)
                new_items = {item_id for item_id, _ in delta.to_add}
                ineligible = [item_id for item_id in items.ineligible if item_id in new_items]
                if ineligible:
                    return self._reject(f"Some {kind.plural} are not active", ineligible)

            replace_container(self.session, kind, section_id, desired_items, publisher_id)
            affected = {item_id for item_id, _ in current} | set(desired_items)
            recompute_published_flags(self.session, kind, affected)

            return PublicationResult(
                success=True,
                message=f"Section {kind.plural} updated successfully",
                added=len(delta.to_add),
                removed=len(delta.to_remove),
                updated=len(delta.unchanged),
            )

        return self._run("mappings", desired_items, [section_id], work, publisher_id=publisher_id)

    def update_item_sections(
        self, item_id: int, section_ids: Sequence[int], publisher_id: Optional[str] = None
    ) -> PublicationResult:
        """
        Replace the set of sections one item is published into.

        Sections dropped from the set are compacted; new sections receive the
        item at their end.
        """
        kind = self.kind
        desired_sections = unique_ids(section_ids or [])

        def work() -> PublicationResult:
            require_publisher(publisher_id)
            items = validate_items(self.session, kind, [item_id])
            if items.rejected:
                return self._reject(f"Some {kind.plural} do not exist", items.rejected)

            if desired_sections:
                sections = validate_containers(self.session, desired_sections)
                if sections.rejected:
                    return self._reject("Some sections do not exist", sections.rejected)

            current = current_pairs(self.session, kind, item_ids=[item_id])
            delta = resolve_mappings(cross_pairs([item_id], desired_sections), current)
            if delta.to_add and items.ineligible:
                return self._reject(f"Some {kind.plural} are not active", items.ineligible)

            lock_containers(self.session, [section for _, section in delta.to_add + delta.to_remove])
            removed = remove_mappings(self.session, kind, delta.to_remove)
            append_mappings(self.session, kind, delta.to_add, publisher_id)
            recompute_published_flags(self.session, kind, [item_id])

            return PublicationResult(
                success=True,
                message=f"{kind.name.capitalize()} sections publish mappings updated",
                added=len(delta.to_add),
                removed=removed,
                updated=len(delta.unchanged),
            )

        return self._run("item_sections", [item_id], desired_sections, work, publisher_id=publisher_id)

    # ------------------------------------------------------------------
    # Transaction handling
    # ------------------------------------------------------------------

    def _reject(self, message: str, invalid_ids: Sequence[int]) -> PublicationResult:
        return PublicationResult(
            success=False, message=f"{message}: {_join(invalid_ids)}", invalid_ids=list(invalid_ids)
        )

    def _run(
        self,
        action: str,
        item_ids: Sequence[int],
        section_ids: Sequence[int],
        work: Callable[[], PublicationResult],
        publisher_id: Optional[str] = None,
    ) -> PublicationResult:
        kind = self.kind
        item_ids = list(item_ids or [])
        section_ids = list(section_ids or [])

        try:
            result = work()
        except EmptySelectionError as e:
            # Raised before any statement runs
            self.session.rollback()
            emit_event(
                kind.events[f"{action}_rejected"],
                MappingFailure(kind.name, item_ids, section_ids, error=e.message),
            )
            return PublicationResult(success=False, message=e.message)
        except AuthenticationRequired as e:
            self.session.rollback()
            emit_event(
                kind.events[f"{action}_rejected"],
                MappingFailure(kind.name, item_ids, section_ids, error=e.message),
            )
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("%s %s failed, transaction rolled back", kind.plural, action)
            emit_event(
                kind.events[f"{action}_error"],
                MappingFailure(kind.name, item_ids, section_ids, error=str(e)),
            )
            raise PublicationFailed(f"Failed to {_ACTION_VERBS[action]} {kind.plural}") from e

        if not result.success:
            self.session.rollback()
            emit_event(
                kind.events[f"{action}_rejected"],
                MappingFailure(kind.name, item_ids, section_ids, error=result.message, invalid_ids=result.invalid_ids),
            )
            return result

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("%s %s commit failed, transaction rolled back", kind.plural, action)
            emit_event(
                kind.events[f"{action}_error"],
                MappingFailure(kind.name, item_ids, section_ids, error=str(e)),
            )
            raise PublicationFailed(f"Failed to {_ACTION_VERBS[action]} {kind.plural}") from e

        emit_event(
            kind.events[action],
            MappingChange(
                kind.name,
                item_ids,
                section_ids,
                added=result.added,
                removed=result.removed,
                updated=result.updated,
                publisher_id=publisher_id,
            ),
        )
        return result

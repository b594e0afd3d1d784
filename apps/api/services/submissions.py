"""Public submission intake and moderation workflow."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from models.base import SheetRecord
from models.sections import SUBMISSIONS
from models.submission import APPROVED, DISMISSED, PENDING, Submission
from services.content import ContentRepository, new_record_id, resolve_section, utc_now_iso
from services.errors import NotFound, RateLimited, StoreUnavailable, ValidationError
from services.rate_limiter import RateLimiter
from services.sheets_store import SheetsStore, StoredRecord

logger = logging.getLogger(__name__)

HONEYPOT_FIELD = "website"


def _normalize_text(value: Any) -> str:
    return str(value or "").strip()


def _accepted(submission_id: str, date_submitted: str) -> Dict[str, Any]:
    return {"success": True, "id": submission_id, "dateSubmitted": date_submitted}


class SubmissionWorkflow:
    """
    Intake -> pending queue -> approved | dismissed.

    Approval writes to two sheets without a transaction: the item is published
    first and the submission flipped second. If the flip fails the submission
    stays pending; approving it again reuses the already published item
    (matched by url in the target section) instead of adding a duplicate.
    """

    def __init__(self, store: SheetsStore, repository: ContentRepository, rate_limiter: RateLimiter):
        self.store = store
        self.repository = repository
        self.rate_limiter = rate_limiter

    async def submit(self, data: Dict[str, Any], client_id: str) -> Dict[str, Any]:
        if _normalize_text(data.get(HONEYPOT_FIELD)):
            # Looks like a normal success so bots learn nothing.
            logger.info("Discarded honeypot submission from %s", client_id)
            return _accepted(new_record_id(), utc_now_iso())

        section_key = _normalize_text(data.get("section")).lower()
        url = _normalize_text(data.get("url"))
        if not section_key:
            raise ValidationError("Section is required")
        section = resolve_section(section_key)
        if not url:
            raise ValidationError("URL is required")

        if not await self.rate_limiter.consume(client_id):
            raise RateLimited("Too many submissions. Please wait a minute.")

        submission = Submission(
            id=new_record_id(),
            date_submitted=utc_now_iso(),
            section=section.key,
            title=_normalize_text(data.get("title")) or url,
            url=url,
            source=_normalize_text(data.get("source")),
            notes=_normalize_text(data.get("notes")),
            submitter_email=_normalize_text(data.get("submitterEmail") or data.get("email")),
            status=PENDING,
            newsletter_signup=bool(data.get("newsletterSignup")),
        )
        await self.store.append_record(SUBMISSIONS, submission)
        logger.info("Queued %s submission %s from %s", section.key, submission.id, client_id)
        return _accepted(submission.id, submission.date_submitted)

    async def list_pending(self) -> List[Submission]:
        try:
            stored = await self.store.read_records(SUBMISSIONS)
        except StoreUnavailable as exc:
            logger.warning("Listing submissions failed, returning empty queue: %s", exc)
            return []
        pending = [entry.record for entry in stored if entry.record.is_pending]
        pending.sort(key=lambda submission: submission.date_submitted, reverse=True)
        return pending

    async def _load_pending(self, submission_id: str) -> StoredRecord:
        stored = await self.store.find_record(SUBMISSIONS, submission_id)
        if stored is None or not stored.record.is_pending:
            raise NotFound(f"Pending submission {submission_id} not found")
        return stored

    async def approve(self, submission_id: str) -> SheetRecord:
        stored = await self._load_pending(submission_id)
        submission: Submission = stored.record
        section = resolve_section(submission.section)

        item = await self.repository.find_by_url(section.key, submission.url)
        if item is None:
            item = await self.repository.add_item(
                section.key,
                {
                    "title": submission.title or submission.url,
                    "url": submission.url,
                    "source": submission.source,
                },
                added_by=f"submission:{submission.id}",
            )
        else:
            logger.info("Submission %s already published as %s item %s", submission.id, section.key, item.id)

        await self.store.write_status(SUBMISSIONS, stored.row_number, APPROVED)
        logger.info("Approved submission %s into %s", submission.id, section.key)
        return item

    async def dismiss(self, submission_id: str) -> None:
        stored = await self._load_pending(submission_id)
        await self.store.write_status(SUBMISSIONS, stored.row_number, DISMISSED)
        logger.info("Dismissed submission %s", submission_id)

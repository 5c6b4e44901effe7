"""
One-time migration of legacy leave requests.

The previous data store had no columns for the leave type or status of a
request, so both were packed into the free-text reason:

    "[LEAVETYPE:3][STATUS:approved] Family wedding"

parse_tagged_reason() splits such a value apart and migrate_tagged_reasons()
rewrites the rows with proper columns. Nothing in the application writes
these tags.
"""
import logging
import re
from typing import Dict, NamedTuple, Optional

from sqlalchemy.orm import Session

from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.leave_type import LeaveType

logger = logging.getLogger(__name__)

LEAVE_TYPE_TAG = re.compile(r"\[LEAVETYPE:([^\]]+)\]\s*")
STATUS_TAG = re.compile(r"\[STATUS:(\w+)\]\s*")


class TaggedReason(NamedTuple):
    leave_type_ref: Optional[str]
    status: LeaveStatus
    reason: Optional[str]
    tagged: bool


def parse_tagged_reason(raw: Optional[str]) -> TaggedReason:
    if not raw:
        return TaggedReason(None, LeaveStatus.PENDING, None, False)

    type_match = LEAVE_TYPE_TAG.search(raw)
    status_match = STATUS_TAG.search(raw)

    status = LeaveStatus.PENDING
    if status_match:
        try:
            status = LeaveStatus(status_match.group(1).lower())
        except ValueError:
            logger.warning(f"Unknown legacy status '{status_match.group(1)}', treating as pending")

    cleaned = STATUS_TAG.sub("", LEAVE_TYPE_TAG.sub("", raw)).strip()
    return TaggedReason(
        leave_type_ref=type_match.group(1).strip() if type_match else None,
        status=status,
        reason=cleaned or None,
        tagged=bool(type_match or status_match),
    )


def _resolve_leave_type(db: Session, ref: str, cache: Dict[str, Optional[int]]) -> Optional[int]:
    if ref in cache:
        return cache[ref]
    leave_type = None
    if ref.isdigit():
        leave_type = db.get(LeaveType, int(ref))
    if leave_type is None:
        leave_type = db.query(LeaveType).filter(LeaveType.code == ref.upper()).first()
    cache[ref] = leave_type.id if leave_type else None
    return cache[ref]


def migrate_tagged_reasons(db: Session, dry_run: bool = False) -> Dict[str, int]:
    """
    Move bracket tags out of reason text into leave_type_id / status.
    Safe to re-run: rows without tags are left alone.
    """
    stats = {"scanned": 0, "migrated": 0, "unresolved_type": 0}
    cache: Dict[str, Optional[int]] = {}

    rows = db.query(LeaveRequest).filter(LeaveRequest.reason.like("%[%:%]%")).all()
    for leave in rows:
        stats["scanned"] += 1
        parsed = parse_tagged_reason(leave.reason)
        if not parsed.tagged:
            continue

        if parsed.leave_type_ref:
            leave_type_id = _resolve_leave_type(db, parsed.leave_type_ref, cache)
            if leave_type_id is None:
                stats["unresolved_type"] += 1
                logger.warning(
                    f"Leave request {leave.id}: unknown leave type '{parsed.leave_type_ref}'",
                    extra={"leave_request_id": leave.id},
                )
            elif leave.leave_type_id is None:
                leave.leave_type_id = leave_type_id

        leave.status = parsed.status.value
        leave.reason = parsed.reason
        stats["migrated"] += 1

    if dry_run:
        db.rollback()
    else:
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info(f"Bracket-tag migration finished: {stats}", extra={"dry_run": dry_run})
    return stats

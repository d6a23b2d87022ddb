"""Account deletion: best-effort cleanup of files and per-user rows, then the identity itself."""

from typing import Awaitable, Callable

from beanie import Document
from pydantic import BaseModel, Field

from fittrack.core.audit import log_event
from fittrack.core.exceptions import AccountDeletionFailedError
from fittrack.core.logging import get_logger
from fittrack.models.notification_preference import NotificationPreference
from fittrack.models.nutrition_log import NutritionLog
from fittrack.models.nutrition_requirement import NutritionRequirement
from fittrack.models.profile import Profile, ProfileDetails
from fittrack.models.progress import ProgressPhoto, ProgressRecord
from fittrack.models.user import User
from fittrack.models.user_role import UserRole
from fittrack.models.water_intake import WaterIntake
from fittrack.storage.base import StorageBackend

log = get_logger(__name__)

STORAGE_PREFIXES = ("avatars", "progress-photos")

# Deleted in this order; payments and audit_logs are kept for bookkeeping.
USER_TABLES: list[type[Document]] = [
    Profile,
    ProgressPhoto,
    ProgressRecord,
    NutritionLog,
    WaterIntake,
    NutritionRequirement,
    ProfileDetails,
    NotificationPreference,
    UserRole,
]


class StepResult(BaseModel):
    resource: str
    ok: bool
    deleted: int = 0
    error: str | None = None


class DeletionReport(BaseModel):
    user_id: str
    steps: list[StepResult] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return all(s.ok for s in self.steps)

    def as_list(self) -> list[dict]:
        return [s.model_dump() for s in self.steps]


DeleteFn = Callable[[], Awaitable[int]]


def _storage_step(storage: StorageBackend, prefix: str) -> DeleteFn:
    async def run() -> int:
        keys = await storage.list(prefix)
        for key in keys:
            await storage.delete(key)
        return len(keys)
    return run


def _table_step(model: type[Document], user_id: str) -> DeleteFn:
    async def run() -> int:
        result = await model.find(model.user_id == user_id).delete()
        return result.deleted_count if result is not None else 0
    return run


def cleanup_steps(user_id: str, storage: StorageBackend) -> list[tuple[str, DeleteFn]]:
    """Ordered (resource, delete_fn) pairs: stored files first, then rows."""
    steps: list[tuple[str, DeleteFn]] = []
    for prefix in STORAGE_PREFIXES:
        steps.append((f"storage:{prefix}", _storage_step(storage, f"{prefix}/{user_id}/")))
    for model in USER_TABLES:
        steps.append((model.Settings.name, _table_step(model, user_id)))
    return steps


async def run_cleanup(user_id: str, steps: list[tuple[str, DeleteFn]]) -> DeletionReport:
    """Run every step; a failing step is recorded and the next one still runs."""
    report = DeletionReport(user_id=user_id)
    for resource, delete_fn in steps:
        try:
            deleted = await delete_fn()
        except Exception as e:
            log.error("account_deletion_step_failed", user_id=user_id, resource=resource, error=str(e))
            report.steps.append(StepResult(resource=resource, ok=False, error=str(e)))
            continue
        log.info("account_deletion_step", user_id=user_id, resource=resource, deleted=deleted)
        report.steps.append(StepResult(resource=resource, ok=True, deleted=deleted))
    return report


async def delete_account(user: User, storage: StorageBackend) -> DeletionReport:
    """
    Remove the user's files and rows (best effort), then the identity (fatal on failure).
    Once this returns, tokens issued to the user no longer authenticate.
    """
    user_id = str(user.id)
    report = await run_cleanup(user_id, cleanup_steps(user_id, storage))
    try:
        await user.delete()
    except Exception as e:
        log.error("account_identity_delete_failed", user_id=user_id, error=str(e))
        raise AccountDeletionFailedError(
            f"Could not delete account: {e}",
            details={"report": report.as_list()},
        ) from e
    report.steps.append(StepResult(resource="users", ok=True, deleted=1))
    log.info("account_deleted", user_id=user_id, complete=report.complete)
    await log_event(user_id, "account_deleted", "user", user_id, {"complete": report.complete})
    return report

import certifi
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from fittrack.core.config import Settings
from fittrack.models.audit_log import AuditLog
from fittrack.models.notification_preference import NotificationPreference
from fittrack.models.nutrition_log import NutritionLog
from fittrack.models.nutrition_requirement import NutritionRequirement
from fittrack.models.payment import Payment
from fittrack.models.profile import Profile, ProfileDetails
from fittrack.models.progress import ProgressPhoto, ProgressRecord
from fittrack.models.user import User
from fittrack.models.user_role import UserRole
from fittrack.models.water_intake import WaterIntake

DOCUMENT_MODELS = [
    User,
    UserRole,
    Payment,
    Profile,
    ProfileDetails,
    NutritionRequirement,
    NutritionLog,
    WaterIntake,
    ProgressRecord,
    ProgressPhoto,
    NotificationPreference,
    AuditLog,
]


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true). Avoids TLS for plain mongodb:// in CI."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


async def init_db(settings: Settings, database: AsyncIOMotorDatabase | None = None) -> None:
    """Register document models; tests pass an in-memory database."""
    if database is None:
        kwargs = {}
        if _use_tls(settings.mongodb_uri):
            # Atlas in Docker needs the certifi bundle and no OCSP endpoint check
            kwargs["tlsCAFile"] = certifi.where()
            kwargs["tlsDisableOCSPEndpointCheck"] = True
        client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
        database = client[settings.mongodb_db_name]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)

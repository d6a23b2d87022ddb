from fittrack.models.audit_log import AuditLog
from fittrack.models.notification_preference import NotificationPreference
from fittrack.models.nutrition_log import NutritionLog
from fittrack.models.nutrition_requirement import AssignedPlan, NutritionRequirement
from fittrack.models.payment import Payment
from fittrack.models.profile import Profile, ProfileDetails
from fittrack.models.progress import ProgressPhoto, ProgressRecord
from fittrack.models.user import User, UserMetadata
from fittrack.models.user_role import UserRole
from fittrack.models.water_intake import WaterIntake

__all__ = [
    "User",
    "UserMetadata",
    "UserRole",
    "Payment",
    "Profile",
    "ProfileDetails",
    "NutritionLog",
    "NutritionRequirement",
    "AssignedPlan",
    "WaterIntake",
    "ProgressRecord",
    "ProgressPhoto",
    "NotificationPreference",
    "AuditLog",
]

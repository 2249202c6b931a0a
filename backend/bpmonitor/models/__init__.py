from .user import User, Role, PROVIDER_ROLES, USER_STATUS_CHOICES
from .reading import BloodPressureReading
from .care_assignment import CareAssignment
from .revoked_token import RevokedToken
from .rate_limit_entry import RateLimitEntry

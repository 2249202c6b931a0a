from .encryption import encrypt_phi, decrypt_phi, hash_email
from .audit_logger import audit_log, audit_phi_access
from .auth import generate_access_token, token_required, role_required
from .validators import validate_sign_up, validate_reading, validate_profile_update
from .rate_limiter import rate_limit, login_limiter, signup_limiter

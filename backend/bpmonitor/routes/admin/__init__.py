"""
Admin API routes.
"""
import logging
from flask import Blueprint
from bpmonitor.models import Role
from bpmonitor.utils.auth import role_required

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)

admin_required = role_required(Role.ADMIN)


# Import submodules to register routes on admin_bp
from . import stats        # noqa: E402, F401
from . import users        # noqa: E402, F401
from . import assignments  # noqa: E402, F401

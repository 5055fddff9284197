from upload_intake.backend.app.core.config import settings
from upload_intake.backend.app.core.deps import get_file_storage, get_intake_limits, get_upload_policy

__all__ = ['settings',
           'get_file_storage',
           'get_intake_limits',
           'get_upload_policy']

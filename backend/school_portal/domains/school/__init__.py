"""
School domain: the public school profile.
"""

from .service import SchoolInfoService, seed_default_school_info  # noqa: F401

"""
Students domain: graduation records and the public graduation lookup.
"""

from .repository import StudentRepository  # noqa: F401
from .service import StudentService  # noqa: F401

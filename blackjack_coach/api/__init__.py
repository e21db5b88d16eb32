"""Optional local FastAPI server (loopback only)"""

from .server import APIServer, create_app
from .auth import TokenAuth
from .schemas import ItemResponse, SubmitRequest, GradeResponse

__all__ = [
    'APIServer',
    'create_app',
    'TokenAuth',
    'ItemResponse',
    'SubmitRequest',
    'GradeResponse'
]

from .user import User
from .session import UserSession
from .job import Job

from .base import MySQLService
from .db_engine import engine
from .session import get_async_session
from .problem.services import ProblemService, TestCaseService
from .submission.services import SubmissionService, TestResultService, UserProblemStatService

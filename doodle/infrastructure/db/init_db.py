import logging

from doodle.infrastructure.db.base import Base

# Imported for their side effect of registering tables on Base.metadata
from doodle.infrastructure.db.models.user_model import UserModel  # noqa: F401
from doodle.infrastructure.db.models.course_model import CourseModel, CourseFileModel, EnrollmentModel  # noqa: F401
from doodle.infrastructure.db.models.topic_model import TopicModel, SubtopicModel  # noqa: F401
from doodle.infrastructure.db.models.assessment_model import AssessmentModel, AssessmentTopicModel  # noqa: F401
from doodle.infrastructure.db.models.question_model import QuestionModel, QuestionOptionModel  # noqa: F401
from doodle.infrastructure.db.models.question_bank_model import QuestionBankModel, QuestionBankOptionModel  # noqa: F401
from doodle.infrastructure.db.models.attempt_model import StudentAttemptModel, StudentAnswerModel  # noqa: F401

logger = logging.getLogger(__name__)


def init_db(engine) -> None:
    logger.info("Creating database tables if missing")
    Base.metadata.create_all(bind=engine)

ROLE_INSTRUCTOR = "instructor"
ROLE_STUDENT = "student"
ROLES = (ROLE_INSTRUCTOR, ROLE_STUDENT)

MCQ = "MCQ"
MSQ = "MSQ"
SUBJECTIVE = "SUBJECTIVE"
QUESTION_TYPES = (MCQ, MSQ, SUBJECTIVE)

POINTS_BY_TYPE = {MCQ: 1.0, MSQ: 2.0, SUBJECTIVE: 5.0}

EASY = "EASY"
MEDIUM = "MEDIUM"
HARD = "HARD"
DIFFICULTIES = (EASY, MEDIUM, HARD)

BLOOM_LEVELS = ("REMEMBER", "UNDERSTAND", "APPLY", "ANALYZE", "EVALUATE", "CREATE")
DEFAULT_BLOOM_LEVEL = "UNDERSTAND"

QUIZ_LEVELS = ("UG", "PG")

DEFAULT_DIFFICULTY_DISTRIBUTION = {"easy": 30, "medium": 50, "hard": 20}

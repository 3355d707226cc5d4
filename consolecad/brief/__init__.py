"""Brief Normalizer: question set and draft → DesignIntentBrief."""

from consolecad.brief.normalizer import FieldError, NormalizeResult, normalize_brief, validate_draft
from consolecad.brief.questions import QUESTION_SET_V0_1, Question, QuestionSet

__all__ = [
    "FieldError",
    "NormalizeResult",
    "QUESTION_SET_V0_1",
    "Question",
    "QuestionSet",
    "normalize_brief",
    "validate_draft",
]

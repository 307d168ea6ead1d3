from .user import User
from .project import Project
from .feedback_item import (
    FeedbackItem,
    FEEDBACK_TYPES,
    FEEDBACK_STATUSES,
    TYPE_FEATURE,
    TYPE_BUG,
    TYPE_IMPROVEMENT,
    STATUS_OPEN,
    STATUS_IN_PROGRESS,
    STATUS_CLOSED,
)
from .vote import Vote, VOTE_UP, VOTE_DOWN, VOTE_TYPES
from .comment import Comment, DELETED_PLACEHOLDER
from .waitlist import WaitlistRegistration

__all__ = [
    "User",
    "Project",
    "FeedbackItem",
    "FEEDBACK_TYPES",
    "FEEDBACK_STATUSES",
    "TYPE_FEATURE",
    "TYPE_BUG",
    "TYPE_IMPROVEMENT",
    "STATUS_OPEN",
    "STATUS_IN_PROGRESS",
    "STATUS_CLOSED",
    "Vote",
    "VOTE_UP",
    "VOTE_DOWN",
    "VOTE_TYPES",
    "Comment",
    "DELETED_PLACEHOLDER",
    "WaitlistRegistration",
]

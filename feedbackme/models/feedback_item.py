from sqlalchemy import func, CheckConstraint
from feedbackme.extensions import db

# Keep simple text+CHECK for evolvable enums (no DB enum migration pain)
TYPE_FEATURE = "feature"
TYPE_BUG = "bug"
TYPE_IMPROVEMENT = "improvement"
FEEDBACK_TYPES = (TYPE_FEATURE, TYPE_BUG, TYPE_IMPROVEMENT)

STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in-progress"
STATUS_CLOSED = "closed"
FEEDBACK_STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)

class FeedbackItem(db.Model):
    __tablename__ = "feedback_items"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_OPEN, server_default=STATUS_OPEN)

    # Denormalized counters, maintained by services.voting
    upvotes = db.Column(db.Integer, nullable=False, default=0, server_default=db.text("0"))
    downvotes = db.Column(db.Integer, nullable=False, default=0, server_default=db.text("0"))

    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    project = db.relationship("Project", lazy="joined")

    __table_args__ = (
        CheckConstraint("type IN ('feature','bug','improvement')", name="ck_feedback_items_type_valid"),
        CheckConstraint("status IN ('open','in-progress','closed')", name="ck_feedback_items_status_valid"),
        CheckConstraint("upvotes >= 0 AND downvotes >= 0", name="ck_feedback_items_counters_nonneg"),
        db.Index("ix_feedback_items_project_created_at", "project_id", "created_at"),
    )

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            title=self.title,
            description=self.description,
            type=self.type,
            status=self.status,
            upvotes=self.upvotes,
            downvotes=self.downvotes,
            projectId=self.project_id,
            userId=self.user_id,
            createdAt=self.created_at.isoformat() if self.created_at else None,
        )

    def __repr__(self) -> str:
        return f"<FeedbackItem id={self.id} type={self.type!r} status={self.status!r}>"

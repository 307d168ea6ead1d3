from sqlalchemy import func, CheckConstraint, UniqueConstraint
from feedbackme.extensions import db

VOTE_UP = "upvote"
VOTE_DOWN = "downvote"
VOTE_TYPES = (VOTE_UP, VOTE_DOWN)

class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Integer, primary_key=True)
    feedback_item_id = db.Column(
        db.Integer,
        db.ForeignKey("feedback_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vote_type = db.Column(db.String(10), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        # one vote per (user, item)
        UniqueConstraint("user_id", "feedback_item_id", name="uq_votes_user_item"),
        CheckConstraint("vote_type IN ('upvote','downvote')", name="ck_votes_type_valid"),
    )

    def __repr__(self) -> str:
        return f"<Vote id={self.id} item={self.feedback_item_id} user={self.user_id} type={self.vote_type!r}>"

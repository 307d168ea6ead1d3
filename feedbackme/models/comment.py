from sqlalchemy import func
from feedbackme.extensions import db

DELETED_PLACEHOLDER = "[deleted]"

class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)

    feedback_item_id = db.Column(
        db.Integer,
        db.ForeignKey("feedback_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null for guest comments; guests leave name/email instead
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_name = db.Column(db.String(100), nullable=True)
    user_email = db.Column(db.String(255), nullable=True)

    # One level deep; enforced in services.comments, not by the schema
    parent_comment_id = db.Column(
        db.Integer,
        db.ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    is_moderated = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default=db.false())

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    author = db.relationship("User", lazy="joined")
    feedback_item = db.relationship("FeedbackItem")

    __table_args__ = (
        db.Index("ix_comments_item_parent_created_at", "feedback_item_id", "parent_comment_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id} item={self.feedback_item_id} deleted={self.is_deleted}>"

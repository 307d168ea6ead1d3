from sqlalchemy import func
from feedbackme.extensions import db

class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    domain = db.Column(db.String(253), nullable=False)
    # Set once at creation; there is no code path that rewrites it
    api_key = db.Column(db.String(64), nullable=False, unique=True, index=True)

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default=db.true())

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    owner = db.relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            name=self.name,
            description=self.description,
            domain=self.domain,
            apiKey=self.api_key,
            userId=self.user_id,
            isActive=self.is_active,
            createdAt=self.created_at.isoformat() if self.created_at else None,
            updatedAt=self.updated_at.isoformat() if self.updated_at else None,
        )

    def __repr__(self) -> str:
        return f"<Project id={self.id} domain={self.domain!r} active={self.is_active}>"

from sqlalchemy import func
from feedbackme.extensions import db

class WaitlistRegistration(db.Model):
    __tablename__ = "waitlist_registrations"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(200), nullable=False)
    # Stored trimmed + lowercased by services.waitlist
    email = db.Column(db.String(320), nullable=False, unique=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        db.Index("ix_waitlist_registrations_created_at", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<WaitlistRegistration id={self.id}>"

from flask_sqlalchemy import SQLAlchemy
from datetime import datetime, timezone
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)  # stored lower-cased
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    company = db.Column(db.String(200), nullable=False, default="")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    reports = db.relationship(
        "Report", back_populates="owner", cascade="all, delete-orphan"
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "company": self.company or "",
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class Report(db.Model):
    __tablename__ = "reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    report_id = db.Column(db.String(50), unique=True, nullable=False, index=True)  # external id
    title = db.Column(db.String(200), nullable=False, default="Untitled Report")
    data = db.Column(db.JSON, nullable=False)
    lang = db.Column(db.String(5), nullable=False, default="en")
    score = db.Column(db.Integer, nullable=False, default=0)  # low=1, medium=2, high=3
    file_names = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)

    owner = db.relationship("User", back_populates="reports")

    def summary(self):
        return {
            "reportId": self.report_id,
            "title": self.title,
            "lang": self.lang,
            "score": self.score,
            "fileNames": self.file_names or [],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self):
        payload = self.summary()
        payload["data"] = self.data
        return payload

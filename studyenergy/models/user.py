# studyenergy/models/user.py
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from .. import db

USERNAME_MAX_LENGTH = 22


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    username = db.Column(db.String(USERNAME_MAX_LENGTH), nullable=False)
    # lower-cased username, keeps handles unique case-insensitively
    username_key = db.Column(db.String(USERNAME_MAX_LENGTH), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @staticmethod
    def normalize_username(username: str) -> str:
        return (username or "").strip().lower()

    @classmethod
    def find_by_username(cls, username: str):
        return cls.query.filter_by(username_key=cls.normalize_username(username)).first()

    def set_username(self, username: str) -> None:
        self.username = username.strip()
        self.username_key = self.normalize_username(username)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

"""
User model
Represents a club member who can enroll in events, lead days and own events
"""
from datetime import datetime


def create_user_model(db):
    """Factory function to create User model with db instance"""

    class User(db.Model):
        """
        User model representing club members

        Attributes:
            id: Primary key
            nickname: Display name shown to other members
            avatar_url: Optional avatar image URL
            api_token: Bearer token presented by API clients
            is_active: Whether the account may act at all
            created_at: Account creation timestamp
        """
        __tablename__ = 'users'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        nickname = db.Column(db.String(50), nullable=False)
        avatar_url = db.Column(db.String(255))
        api_token = db.Column(db.String(64), unique=True, index=True)
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        def to_summary(self):
            """Public fields used whenever a user is embedded in a response"""
            return {
                'id': self.id,
                'nickname': self.nickname,
                'avatar_url': self.avatar_url
            }

        def __repr__(self):
            return f'<User {self.id}: {self.nickname}>'

    return User

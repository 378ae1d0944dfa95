from models import db
from ledger.records import ChatTurn


class ChatMessage(db.Model):
    __tablename__ = "chat_messages"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), index=True, nullable=False)
    role = db.Column(db.String(16), nullable=False)  # user | assistant
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), index=True)

    def to_turn(self) -> ChatTurn:
        return ChatTurn(
            id=self.id,
            owner=self.user_id,
            role=self.role,
            content=self.content,
            created_at=self.created_at,
        )

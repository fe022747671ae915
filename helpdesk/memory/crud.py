from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from .models import Conversation, Message, SENDERS
from utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class ConversationStore:
    """Conversation/message persistence on top of a SQLAlchemy session factory.

    Every method opens a short-lived session, so a single store instance can
    be shared by all requests of the process.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # -----------------------------------------------------------------------
    # Conversations
    # -----------------------------------------------------------------------

    def create_conversation(self) -> Conversation:
        db: Session = self._session_factory()
        try:
            conversation = Conversation()
            db.add(conversation)
            db.commit()
            logger.info(f"Created conversation {conversation.id}")
            return conversation
        finally:
            db.close()

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """Return the conversation or ``None`` if ``conversation_id`` is unknown."""
        db: Session = self._session_factory()
        try:
            return db.get(Conversation, conversation_id)
        finally:
            db.close()

    # -----------------------------------------------------------------------
    # Messages
    # -----------------------------------------------------------------------

    def append_message(self, conversation_id: str, sender: str, text: str) -> Dict[str, Any]:
        """Persist a single chat turn and return it in serialised form.

        An unknown ``conversation_id`` violates the foreign key and the
        ``IntegrityError`` is re-raised after rolling back.
        """
        if sender not in SENDERS:
            raise ValueError(f"Unknown sender {sender!r}; expected one of {SENDERS}")

        db: Session = self._session_factory()
        try:
            msg = Message(conversation_id=conversation_id, sender=sender, text=text)
            db.add(msg)
            db.commit()
            return msg.to_dict()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def list_recent_messages(
        self, conversation_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> List[Dict[str, Any]]:
        """Return the *most recent* ``limit`` messages for ``conversation_id``.

        The list is returned in chronological order (oldest → newest) so that it
        can be appended to a prompt without additional sorting.
        """
        db: Session = self._session_factory()
        try:
            rows = (
                db.query(Message)
                .filter(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp.desc(), Message.id.desc())
                .limit(limit)
                .all()
            )
            # Reverse so we go from oldest → newest.
            rows.reverse()
            return [r.to_dict() for r in rows]
        finally:
            db.close()

    def list_messages(self, conversation_id: str) -> List[Dict[str, Any]]:
        """Return every message of ``conversation_id``, oldest first.

        No existence check: an unknown id simply has no messages.
        """
        db: Session = self._session_factory()
        try:
            rows = (
                db.query(Message)
                .filter(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp.asc(), Message.id.asc())
                .all()
            )
            return [r.to_dict() for r in rows]
        finally:
            db.close()

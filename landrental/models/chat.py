# Chat Models
from sqlalchemy.exc import IntegrityError
from landrental.models.user import db
from landrental.utils.dates import to_iso
from datetime import datetime

MESSAGE_TYPES = ('text', 'image', 'document', 'location')
CHAT_TYPES = ('inquiry', 'rental', 'support')


def thread_key_for(participant_ids, land_id=None, rental_id=None):
    """Lookup key shared by every ordering of the same pair and scope"""
    first, second = sorted(int(pid) for pid in participant_ids)
    return f'{first}:{second}:{land_id or "-"}:{rental_id or "-"}'


class Chat(db.Model):
    __tablename__ = 'chats'

    id = db.Column(db.Integer, primary_key=True)
    # Participants are stored sorted: participant_one_id < participant_two_id
    participant_one_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    participant_two_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    land_id = db.Column(db.Integer, db.ForeignKey('lands.id', ondelete='SET NULL'), index=True)
    rental_id = db.Column(db.Integer, db.ForeignKey('rentals.id', ondelete='SET NULL'), index=True)
    thread_key = db.Column(db.String(80), unique=True, nullable=False)
    chat_type = db.Column(db.String(20), default='inquiry', nullable=False)
    title = db.Column(db.String(200), default='')

    # Denormalized summary for list views
    last_message_content = db.Column(db.String(1000))
    last_message_sender_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    last_message_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    participant_one = db.relationship('User', foreign_keys=[participant_one_id])
    participant_two = db.relationship('User', foreign_keys=[participant_two_id])
    last_message_sender = db.relationship('User', foreign_keys=[last_message_sender_id])
    land = db.relationship('Land', backref='chats')
    rental = db.relationship('Rental', backref='chats')
    messages = db.relationship(
        'ChatMessage',
        back_populates='chat',
        order_by='ChatMessage.timestamp, ChatMessage.id',
        cascade='all, delete-orphan',
    )

    @classmethod
    def for_user(cls, user_id):
        return cls.query.filter(
            db.or_(cls.participant_one_id == user_id, cls.participant_two_id == user_id)
        )

    @classmethod
    def find_or_create(cls, participant_ids, land_id=None, rental_id=None, chat_type=None):
        """
        Return the chat for this participant pair and scope, creating it once.

        The unique thread_key makes a concurrent first contact fail on insert;
        the loser rolls back its savepoint and reads the winner's row.
        """
        key = thread_key_for(participant_ids, land_id, rental_id)
        chat = cls.query.filter_by(thread_key=key).first()
        if chat is not None:
            return chat, False

        first, second = sorted(int(pid) for pid in participant_ids)
        chat = cls(
            participant_one_id=first,
            participant_two_id=second,
            land_id=land_id,
            rental_id=rental_id,
            thread_key=key,
            chat_type=chat_type or ('rental' if rental_id else 'inquiry'),
        )
        try:
            with db.session.begin_nested():
                db.session.add(chat)
        except IntegrityError:
            return cls.query.filter_by(thread_key=key).one(), False
        return chat, True

    @property
    def participant_ids(self):
        return (self.participant_one_id, self.participant_two_id)

    def is_participant(self, user_id):
        return user_id in self.participant_ids

    def add_message(self, sender_id, content, message_type='text', attachments=None):
        now = datetime.utcnow()
        message = ChatMessage(
            sender_id=sender_id,
            content=content,
            message_type=message_type,
            attachments=attachments or [],
            timestamp=now,
        )
        self.messages.append(message)
        self.last_message_content = content
        self.last_message_sender_id = sender_id
        self.last_message_at = now
        self.updated_at = now
        return message

    def mark_as_read(self, reader_id):
        """Flag every message not sent by reader_id as read; returns how many changed"""
        now = datetime.utcnow()
        changed = 0
        for message in self.messages:
            if message.sender_id != reader_id and not message.is_read:
                message.is_read = True
                message.read_at = now
                changed += 1
        return changed

    def unread_messages_for(self, user_id):
        return [m for m in self.messages if m.sender_id != user_id and not m.is_read]

    def paginate_messages(self, page, per_page):
        """
        Page 1 is the most recent `per_page` messages; each page is returned
        oldest first.
        """
        newest_first = list(reversed(self.messages))
        start = (page - 1) * per_page
        return list(reversed(newest_first[start:start + per_page]))

    def to_dict(self, viewer_id=None):
        data = {
            'id': self.id,
            'participants': [
                self.participant_one.to_summary() if self.participant_one else None,
                self.participant_two.to_summary() if self.participant_two else None,
            ],
            'land': self.land.to_summary() if self.land else None,
            'rental': self.rental.to_summary() if self.rental else None,
            'chatType': self.chat_type,
            'title': self.title,
            'lastMessage': {
                'content': self.last_message_content,
                'sender': self.last_message_sender.to_summary() if self.last_message_sender else None,
                'timestamp': to_iso(self.last_message_at),
            } if self.last_message_content is not None else None,
            'isActive': self.is_active,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }
        if viewer_id is not None:
            data['unreadCount'] = len(self.unread_messages_for(viewer_id))
        return data

    def __repr__(self):
        return f'<Chat {self.id} {self.thread_key}>'


class ChatMessage(db.Model):
    __tablename__ = 'chat_messages'

    id = db.Column(db.Integer, primary_key=True)
    chat_id = db.Column(db.Integer, db.ForeignKey('chats.id'), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    content = db.Column(db.String(1000), nullable=False)
    message_type = db.Column(db.String(20), default='text', nullable=False)
    attachments = db.Column(db.JSON, default=list)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    chat = db.relationship('Chat', back_populates='messages')
    sender = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'sender': self.sender.to_summary() if self.sender else None,
            'content': self.content,
            'messageType': self.message_type,
            'attachments': self.attachments or [],
            'isRead': self.is_read,
            'readAt': to_iso(self.read_at),
            'timestamp': to_iso(self.timestamp),
        }

    def __repr__(self):
        return f'<ChatMessage {self.id}>'

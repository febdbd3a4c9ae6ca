# Chat Routes
import logging

from flask import Blueprint
from flask_login import login_required, current_user

from landrental.errors import ValidationError, AuthorizationError, NotFoundError
from landrental.models import db, User, Land, Rental, Chat, ChatMessage
from landrental.schemas import (
    ChatListParams, MessagePageParams, CreateChatRequest, SendMessageRequest,
)
from landrental.utils.api import success, parse_body, parse_query, pagination_meta, get_or_404

logger = logging.getLogger(__name__)

chat_bp = Blueprint('chat', __name__)


def _get_chat_for_participant(chat_id):
    chat = get_or_404(Chat, chat_id, 'Chat not found')
    if not chat.is_participant(current_user.id):
        raise AuthorizationError('You are not a participant in this chat')
    return chat


@chat_bp.route('', methods=['GET'])
@login_required
def list_chats():
    params = parse_query(ChatListParams)
    query = Chat.for_user(current_user.id).filter(Chat.is_active.is_(True))

    total = query.count()
    chats = (query.order_by(Chat.last_message_at.desc(), Chat.id.desc())
             .offset((params.page - 1) * params.limit)
             .limit(params.limit)
             .all())
    return success({
        'chats': [chat.to_dict(viewer_id=current_user.id) for chat in chats],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@chat_bp.route('', methods=['POST'])
@login_required
def create_chat():
    data = parse_body(CreateChatRequest)
    if data.participant_id == current_user.id:
        raise ValidationError('You cannot create a chat with yourself')

    participant = db.session.get(User, data.participant_id)
    if participant is None or not participant.is_active:
        raise NotFoundError('Participant not found')

    if data.land_id is not None:
        get_or_404(Land, data.land_id, 'Land not found')
    if data.rental_id is not None:
        rental = get_or_404(Rental, data.rental_id, 'Rental agreement not found')
        if not (rental.is_participant(current_user.id) and rental.is_participant(participant.id)):
            raise AuthorizationError('Both users must be parties to the rental')

    chat, created = Chat.find_or_create(
        [current_user.id, participant.id],
        land_id=data.land_id,
        rental_id=data.rental_id,
    )
    chat.is_active = True
    if data.initial_message:
        chat.add_message(current_user.id, data.initial_message)
    db.session.commit()

    if created:
        logger.info('Chat %s opened between users %s and %s', chat.id, current_user.id, participant.id)
    return success(
        {'chat': chat.to_dict(viewer_id=current_user.id)},
        message='Chat created successfully' if created else 'Chat found successfully',
        status=201 if created else 200,
    )


@chat_bp.route('/unread-count')
@login_required
def unread_count():
    count = (ChatMessage.query.join(Chat)
             .filter(
                 Chat.is_active.is_(True),
                 db.or_(Chat.participant_one_id == current_user.id,
                        Chat.participant_two_id == current_user.id),
                 ChatMessage.sender_id != current_user.id,
                 ChatMessage.is_read.is_(False),
             )
             .count())
    return success({'unreadCount': count})


@chat_bp.route('/<int:chat_id>', methods=['GET'])
@login_required
def get_chat(chat_id):
    params = parse_query(MessagePageParams)
    chat = _get_chat_for_participant(chat_id)

    if chat.mark_as_read(current_user.id):
        db.session.commit()

    messages = chat.paginate_messages(params.page, params.limit)
    return success({
        'chat': chat.to_dict(viewer_id=current_user.id),
        'messages': [m.to_dict() for m in messages],
        'pagination': pagination_meta(params.page, params.limit, len(chat.messages)),
    })


@chat_bp.route('/<int:chat_id>/messages', methods=['POST'])
@login_required
def send_message(chat_id):
    data = parse_body(SendMessageRequest)
    chat = _get_chat_for_participant(chat_id)

    message = chat.add_message(
        current_user.id,
        data.content,
        message_type=data.message_type,
        attachments=[a.model_dump(exclude_none=True) for a in data.attachments],
    )
    db.session.commit()
    return success({'message': message.to_dict()}, message='Message sent successfully', status=201)


@chat_bp.route('/<int:chat_id>/read', methods=['PUT'])
@login_required
def mark_read(chat_id):
    chat = _get_chat_for_participant(chat_id)
    changed = chat.mark_as_read(current_user.id)
    db.session.commit()
    return success({'markedCount': changed}, message='Messages marked as read')


@chat_bp.route('/<int:chat_id>', methods=['DELETE'])
@login_required
def archive_chat(chat_id):
    chat = _get_chat_for_participant(chat_id)
    chat.is_active = False
    db.session.commit()
    logger.info('Chat %s archived by user %s', chat.id, current_user.id)
    return success(message='Chat archived successfully')

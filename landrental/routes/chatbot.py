# Chatbot Routes
import logging

from flask import Blueprint
from flask_login import current_user

from landrental.schemas import ChatbotMessageRequest, QuickResponseRequest, FeedbackRequest
from landrental.utils import chatbot
from landrental.utils.api import success, parse_body

logger = logging.getLogger(__name__)

chatbot_bp = Blueprint('chatbot', __name__)


def _optional_user_id():
    return current_user.id if current_user.is_authenticated else None


@chatbot_bp.route('/message', methods=['POST'])
def message():
    data = parse_body(ChatbotMessageRequest)
    result = chatbot.handle_message(data.message, _optional_user_id(), data.conversation_history)
    return success(result)


@chatbot_bp.route('/quick-response', methods=['POST'])
def quick_response():
    data = parse_body(QuickResponseRequest)
    intent = chatbot.classify_intent(data.message)
    return success({'response': chatbot.get_quick_response(intent), 'intent': intent})


@chatbot_bp.route('/faq')
def faq():
    return success({'faqs': chatbot.FAQS})


@chatbot_bp.route('/tips/farming')
def farming_tips():
    return success({'tips': chatbot.FARMING_TIPS})


@chatbot_bp.route('/tips/platform')
def platform_tips():
    return success({'tips': chatbot.PLATFORM_TIPS})


@chatbot_bp.route('/feedback', methods=['POST'])
def feedback():
    data = parse_body(FeedbackRequest)
    logger.info('Chatbot feedback from user %s: rating=%s message=%r response=%r feedback=%r',
                _optional_user_id(), data.rating, data.message, data.response, data.feedback)
    return success(message='Feedback submitted successfully')

# Farming Assistant Chatbot
import logging
import os
from datetime import datetime

import requests
from flask import current_app

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.openai.com/v1/chat/completions'
DEFAULT_MODEL = 'gpt-3.5-turbo'

# Checked in order; the first intent with a matching keyword wins
INTENT_KEYWORDS = (
    ('farming_advice', ('soil', 'crop', 'water', 'irrigation', 'fertilizer', 'pest')),
    ('land_rental', ('rent', 'lease', 'land', 'property')),
    ('platform_help', ('register', 'login', 'account', 'profile')),
    ('payment_help', ('payment', 'money', 'cost', 'price', 'fee')),
    ('verification', ('verify', 'document', 'proof', 'authentic')),
    ('location', ('location', 'near', 'distance', 'area')),
    ('agreement', ('agreement', 'contract', 'terms', 'sign')),
    ('support', ('help', 'support', 'contact', 'issue')),
)

FALLBACK_RESPONSES = {
    'farming_advice': (
        "Start by testing your soil to understand its composition and nutrient levels. "
        "Crop choice depends on soil type, climate, water availability and market demand, "
        "and drip irrigation is usually more efficient than flood irrigation. "
        "What crops are you planning to grow?"
    ),
    'land_rental': (
        "To rent land, register as a farmer, search for available land in your preferred "
        "location, contact the landowner through chat and agree on terms. To list land, "
        "register as a landowner and add your land details, location and pricing. "
        "We generate the rental agreement for you."
    ),
    'platform_help': (
        "You can register as a farmer or a landowner, then complete your profile with your "
        "contact details and address. A complete profile builds trust with other users. "
        "What would you like help with?"
    ),
    'payment_help': (
        "We support online transfers, bank transfers, cash and cheques. Every agreement has a "
        "payment schedule, and each installment is tracked with its due date so nothing is missed."
    ),
    'verification': (
        "Land verification requires documents such as land deeds, property tax receipts and "
        "survey reports. Verified listings help build trust between landowners and farmers."
    ),
    'location': (
        "You can search for land near you by location and radius. Results show the distance "
        "from your location so you can pick conveniently located land."
    ),
    'agreement': (
        "Rental agreements are generated once the landowner and farmer agree on terms. The "
        "agreement lists the rental terms, payment schedule and responsibilities, and becomes "
        "active once both parties have signed it."
    ),
    'support': (
        "I can answer general questions about farming and the platform. For account problems "
        "or urgent issues, please contact our support team through the help section."
    ),
    'general': (
        "I'm here to help with farming and land rental questions! Ask me about soil "
        "preparation, crop selection, renting land, payments or agreements."
    ),
}

QUICK_RESPONSES = {
    'farming_advice': "I can help with farming advice! Would you like to know about soil preparation, crop selection, irrigation or pest management?",
    'land_rental': "You can search available land, contact landowners and negotiate terms. Are you looking to rent land or to list your own?",
    'platform_help': "I can guide you through registration, profile setup or using the platform's features. What do you need help with?",
    'payment_help': "We support several payment methods and track every installment. What is your payment question?",
    'verification': "Verification reviews documents like land deeds and property tax receipts. Need help with the verification process?",
    'location': "Search for land by location and radius to find listings near you. Which area are you interested in?",
    'agreement': "Agreements are generated once terms are agreed and include the payment schedule. Need help understanding the process?",
    'support': "For technical or urgent issues please contact our support team. I'm here for general farming and platform questions.",
    'general': "I'm here to help with farming and land rental questions! Ask me about crops, soil, renting land or payments.",
}

FARMING_TIPS = [
    "Test your soil before planting to understand its composition and nutrient levels.",
    "Practice crop rotation to maintain soil health and reduce pest problems.",
    "Use organic fertilizers when possible to improve soil structure.",
    "Match your irrigation method to your crop and soil type.",
    "Monitor your crops regularly for signs of pests or diseases.",
    "Keep records of your farming activities for better planning.",
    "Consider intercropping to make the most of your land.",
    "Use mulch to conserve soil moisture and control weeds.",
    "Plan your farming calendar around local weather patterns.",
    "Talk to other farmers to share knowledge and experience.",
]

PLATFORM_TIPS = [
    "Complete your profile with accurate information to build trust.",
    "Upload clear photos of your land.",
    "Respond promptly to inquiries.",
    "Use chat to discuss terms before generating an agreement.",
    "Keep track of your payment schedule to avoid delays.",
    "Read rental agreements carefully before signing.",
    "Use location search to find conveniently located land.",
    "Check a listing's verification status before deciding.",
    "Keep good ratings by fulfilling your commitments.",
    "Contact support if you run into any issues.",
]

FAQS = [
    {
        'question': "How do I rent land through the platform?",
        'answer': "Create an account as a farmer, search for available land in your preferred location, contact the landowner and agree on terms. The landowner then generates a rental agreement for both of you to sign.",
    },
    {
        'question': "How do I list my land for rent?",
        'answer': "Register as a landowner, add your land details including location and pricing, and upload verification documents.",
    },
    {
        'question': "What documents are needed for land verification?",
        'answer': "Land deeds, property tax receipts, survey reports and other ownership documents.",
    },
    {
        'question': "How are payments handled?",
        'answer': "Each agreement has a monthly installment schedule. Installments can be paid online, by bank transfer, cash or cheque, and every payment is tracked.",
    },
    {
        'question': "Can I search for land by location?",
        'answer': "Yes. Search by latitude, longitude and radius to find nearby land, nearest first.",
    },
    {
        'question': "How do rental agreements work?",
        'answer': "The landowner generates an agreement with the rental terms and payment schedule. It becomes active once both the landowner and the farmer have signed it.",
    },
    {
        'question': "What if I have farming questions?",
        'answer': "Ask the assistant about crop selection, soil preparation, irrigation and other agricultural topics.",
    },
    {
        'question': "How do I contact support?",
        'answer': "Use the help section for technical or urgent issues. The assistant can answer general questions.",
    },
]


def _config(key, default=None):
    try:
        value = current_app.config.get(key)
    except RuntimeError:
        # Not in Flask application context
        value = None
    if value is None:
        value = os.environ.get(key)
    return value if value is not None else default


def classify_intent(text):
    """Return the first intent whose keywords appear in text, else 'general'"""
    lowered = (text or '').lower()
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return intent
    return 'general'


def build_system_prompt(context=None):
    context = context or {}
    lines = [
        "You are a helpful farming assistant for a village land rental platform.",
        "You help farmers and landowners with questions about farming, land rental and agricultural practices.",
        "",
        "About the platform:",
        "- Landowners list their land for rent",
        "- Farmers search and rent land for farming",
        "- Land can be searched by location",
        "- Land documents are verified",
        "- Rental agreements and payment schedules are generated and tracked",
        "",
        "Guidelines:",
        "- Give practical, concise farming advice",
        "- Explain land rental processes clearly",
        "- If you don't know something, suggest contacting support",
    ]
    if context.get('intent'):
        lines.append('')
        lines.append(f"Detected topic: {context['intent']}")
    return '\n'.join(lines)


def get_fallback_response(text):
    """Canned answer for the message's intent; never empty"""
    return FALLBACK_RESPONSES.get(classify_intent(text)) or FALLBACK_RESPONSES['general']


def get_quick_response(intent):
    return QUICK_RESPONSES.get(intent, QUICK_RESPONSES['general'])


def respond(text, context=None):
    """
    Answer a user message through the completion API.

    Any failure (missing key, network error, non-2xx status, malformed or
    empty completion) falls back to the canned response for the message's
    intent.

    Args:
        text: User message
        context: dict with optional 'intent' and 'conversationHistory'

    Returns:
        str: non-empty response text
    """
    context = context or {}
    api_key = _config('OPENAI_API_KEY')
    if not api_key:
        return get_fallback_response(text)

    messages = [{'role': 'system', 'content': build_system_prompt(context)}]
    for item in context.get('conversationHistory') or []:
        if isinstance(item, dict) and item.get('role') in ('user', 'assistant') and item.get('content'):
            messages.append({'role': item['role'], 'content': str(item['content'])})
    messages.append({'role': 'user', 'content': text})

    try:
        response = requests.post(
            _config('OPENAI_API_URL', DEFAULT_API_URL),
            json={
                'model': _config('OPENAI_MODEL', DEFAULT_MODEL),
                'messages': messages,
                'max_tokens': 500,
                'temperature': 0.7,
            },
            headers={
                'Authorization': f'Bearer {api_key}',
                'Content-Type': 'application/json',
            },
            timeout=float(_config('CHATBOT_TIMEOUT', 15)),
        )
        if response.status_code != 200:
            logger.warning('Chatbot API returned status %s, using fallback', response.status_code)
            return get_fallback_response(text)

        content = response.json()['choices'][0]['message']['content']
        if not isinstance(content, str) or not content.strip():
            logger.warning('Chatbot API returned an empty completion, using fallback')
            return get_fallback_response(text)
        return content.strip()

    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning('Chatbot API error, using fallback: %s', e)
        return get_fallback_response(text)


def handle_message(message, user_id=None, conversation_history=None):
    """Classify, answer and timestamp one chatbot message"""
    intent = classify_intent(message)
    context = {
        'userId': user_id,
        'intent': intent,
        'conversationHistory': (conversation_history or [])[-5:],
    }
    return {
        'response': respond(message, context),
        'intent': intent,
        'timestamp': datetime.utcnow().isoformat(),
    }

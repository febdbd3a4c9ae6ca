import pytest
import requests

from landrental.utils import chatbot


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError('No JSON body')
        return self._payload


@pytest.fixture(autouse=True)
def no_api_key_in_env(monkeypatch):
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)


def completion(content):
    return FakeResponse(200, {'choices': [{'message': {'content': content}}]})


@pytest.mark.parametrize('text, intent', [
    ('What fertilizer suits black soil?', 'farming_advice'),
    ('I want to lease a small plot', 'land_rental'),
    ('How do I update my profile?', 'platform_help'),
    ('When is my payment due?', 'payment_help'),
    ('How do I sign the agreement?', 'agreement'),
    ('Good morning', 'general'),
    ('', 'general'),
])
def test_classify_intent(text, intent):
    assert chatbot.classify_intent(text) == intent


@pytest.mark.parametrize('text', ['', 'Good morning', 'Which crop grows best here?', '???'])
def test_fallback_is_never_empty(text):
    assert chatbot.get_fallback_response(text).strip()


def test_respond_without_key_uses_fallback(app, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError('No request expected without an API key')

    monkeypatch.setattr(chatbot.requests, 'post', fail)
    with app.app_context():
        assert chatbot.respond('How do I rent land?') == chatbot.FALLBACK_RESPONSES['land_rental']


@pytest.mark.parametrize('outcome', [
    requests.ConnectionError('network down'),
    requests.Timeout('too slow'),
    FakeResponse(503, {'error': 'unavailable'}),
    FakeResponse(200, None),
    FakeResponse(200, {'choices': []}),
    completion('   '),
])
def test_respond_falls_back_on_api_failure(app, monkeypatch, outcome):
    def post(*args, **kwargs):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(chatbot.requests, 'post', post)
    with app.app_context():
        app.config['OPENAI_API_KEY'] = 'test-key'
        assert chatbot.respond('Tips for irrigation?') == chatbot.FALLBACK_RESPONSES['farming_advice']


def test_respond_returns_completion_and_sends_history(app, monkeypatch):
    calls = []

    def post(url, json=None, headers=None, timeout=None):
        calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        return completion('  Sow paddy after the first monsoon rains.  ')

    monkeypatch.setattr(chatbot.requests, 'post', post)
    with app.app_context():
        app.config['OPENAI_API_KEY'] = 'test-key'
        answer = chatbot.respond('When should I sow paddy?', {
            'intent': 'general',
            'conversationHistory': [
                {'role': 'user', 'content': 'Hi'},
                {'role': 'system', 'content': 'ignored'},
                'not a message',
            ],
        })

    assert answer == 'Sow paddy after the first monsoon rains.'
    sent = calls[0]
    assert sent['headers']['Authorization'] == 'Bearer test-key'
    assert sent['timeout'] > 0
    roles = [m['role'] for m in sent['json']['messages']]
    assert roles == ['system', 'user', 'user']


def test_message_route_returns_intent_and_timestamp(client):
    resp = client.post('/api/chatbot/message', json={'message': 'How do I verify my documents?'})
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['intent'] == 'verification'
    assert data['response']
    assert data['timestamp']

    assert client.post('/api/chatbot/message', json={'message': ''}).status_code == 400


def test_quick_response_faq_and_tips(client):
    resp = client.post('/api/chatbot/quick-response', json={'message': 'What is the rent here?'})
    data = resp.get_json()['data']
    assert data['intent'] == 'land_rental'
    assert data['response'] == chatbot.QUICK_RESPONSES['land_rental']

    assert client.get('/api/chatbot/faq').get_json()['data']['faqs'] == chatbot.FAQS
    assert client.get('/api/chatbot/tips/farming').get_json()['data']['tips'] == chatbot.FARMING_TIPS
    assert client.get('/api/chatbot/tips/platform').get_json()['data']['tips'] == chatbot.PLATFORM_TIPS


def test_feedback_rating_range(client, farmer):
    payload = {'message': 'Which crop?', 'response': 'Try millets.', 'rating': 5}
    assert client.post('/api/chatbot/feedback', json=payload, headers=farmer.headers).status_code == 200
    payload['rating'] = 6
    assert client.post('/api/chatbot/feedback', json=payload).status_code == 400

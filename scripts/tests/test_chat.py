from landrental.models import db, Chat


def open_chat(client, user, participant_id, **extra):
    return client.post('/api/chat', json={'participantId': participant_id, **extra}, headers=user.headers)


def test_find_or_create_is_order_independent(app, landowner, farmer, land_id, make_land):
    other_land = make_land(landowner, title='Another plot to rent')
    with app.app_context():
        first, created = Chat.find_or_create([landowner.id, farmer.id], land_id=land_id)
        db.session.commit()
        assert created is True

        again, created = Chat.find_or_create([farmer.id, landowner.id], land_id=land_id)
        assert created is False
        assert again.id == first.id

        scoped, created = Chat.find_or_create([farmer.id, landowner.id], land_id=other_land)
        db.session.commit()
        assert created is True
        assert scoped.id != first.id
        assert Chat.query.count() == 2


def test_find_or_create_recovers_from_duplicate_insert(app, monkeypatch, landowner, farmer, land_id):
    with app.app_context():
        existing, _ = Chat.find_or_create([landowner.id, farmer.id], land_id=land_id)
        db.session.commit()
        existing_id = existing.id

        # Another request committed the thread between our lookup and insert
        query_cls = type(Chat.query)
        real_first = query_cls.first
        lookups = []

        def first_misses_once(self):
            lookups.append(self)
            if len(lookups) == 1:
                return None
            return real_first(self)

        monkeypatch.setattr(query_cls, 'first', first_misses_once)

        chat, created = Chat.find_or_create([farmer.id, landowner.id], land_id=land_id)
        assert created is False
        assert chat.id == existing_id
        assert Chat.query.count() == 1

        chat.add_message(farmer.id, 'Still interested in this land')
        db.session.commit()
        assert len(db.session.get(Chat, existing_id).messages) == 1


def test_create_chat_returns_existing_thread(client, landowner, farmer):
    first = open_chat(client, farmer, landowner.id, initialMessage='Hello, I am interested in your land')
    assert first.status_code == 201
    second = open_chat(client, landowner, farmer.id)
    assert second.status_code == 200
    assert first.get_json()['data']['chat']['id'] == second.get_json()['data']['chat']['id']


def test_create_chat_rejects_self_and_unknown_users(client, farmer):
    assert open_chat(client, farmer, farmer.id).status_code == 400
    resp = open_chat(client, farmer, 9999)
    assert resp.status_code == 404
    assert resp.get_json()['message'] == 'Participant not found'


def test_messages_are_counted_and_read(client, landowner, farmer):
    chat_id = open_chat(client, farmer, landowner.id).get_json()['data']['chat']['id']
    resp = client.post(f'/api/chat/{chat_id}/messages', json={'content': 'Is the borewell working?'},
                       headers=farmer.headers)
    assert resp.status_code == 201
    assert resp.get_json()['data']['message']['isRead'] is False
    client.post(f'/api/chat/{chat_id}/messages', json={'content': 'And the pump?'}, headers=farmer.headers)

    resp = client.get('/api/chat/unread-count', headers=landowner.headers)
    assert resp.get_json()['data']['unreadCount'] == 2
    assert client.get('/api/chat/unread-count', headers=farmer.headers).get_json()['data']['unreadCount'] == 0

    chats = client.get('/api/chat', headers=landowner.headers).get_json()['data']['chats']
    assert chats[0]['unreadCount'] == 2
    assert chats[0]['lastMessage']['content'] == 'And the pump?'

    # Opening the chat marks the other side's messages read
    resp = client.get(f'/api/chat/{chat_id}', headers=landowner.headers)
    assert all(m['isRead'] for m in resp.get_json()['data']['messages'])
    assert client.get('/api/chat/unread-count', headers=landowner.headers).get_json()['data']['unreadCount'] == 0


def test_mark_read_reports_changed_count(client, landowner, farmer):
    chat_id = open_chat(client, farmer, landowner.id, initialMessage='First message here').get_json()['data']['chat']['id']
    resp = client.put(f'/api/chat/{chat_id}/read', headers=landowner.headers)
    assert resp.get_json()['data']['markedCount'] == 1
    resp = client.put(f'/api/chat/{chat_id}/read', headers=landowner.headers)
    assert resp.get_json()['data']['markedCount'] == 0


def test_message_pages_start_from_newest(client, landowner, farmer):
    chat_id = open_chat(client, farmer, landowner.id).get_json()['data']['chat']['id']
    for n in range(1, 6):
        client.post(f'/api/chat/{chat_id}/messages', json={'content': f'message {n}'}, headers=farmer.headers)

    page1 = client.get(f'/api/chat/{chat_id}?page=1&limit=2', headers=landowner.headers).get_json()['data']
    assert [m['content'] for m in page1['messages']] == ['message 4', 'message 5']
    assert page1['pagination']['totalPages'] == 3

    page3 = client.get(f'/api/chat/{chat_id}?page=3&limit=2', headers=landowner.headers).get_json()['data']
    assert [m['content'] for m in page3['messages']] == ['message 1']


def test_non_participant_is_forbidden(client, landowner, farmer, outsider):
    chat_id = open_chat(client, farmer, landowner.id).get_json()['data']['chat']['id']
    assert client.get(f'/api/chat/{chat_id}', headers=outsider.headers).status_code == 403
    resp = client.post(f'/api/chat/{chat_id}/messages', json={'content': 'hi'}, headers=outsider.headers)
    assert resp.status_code == 403
    assert client.get('/api/chat/9999', headers=farmer.headers).status_code == 404


def test_archived_chat_is_hidden_and_reopened(client, landowner, farmer):
    chat_id = open_chat(client, farmer, landowner.id).get_json()['data']['chat']['id']
    assert client.delete(f'/api/chat/{chat_id}', headers=farmer.headers).status_code == 200
    assert client.get('/api/chat', headers=farmer.headers).get_json()['data']['chats'] == []

    resp = open_chat(client, farmer, landowner.id)
    assert resp.status_code == 200
    assert resp.get_json()['data']['chat']['isActive'] is True
    assert len(client.get('/api/chat', headers=farmer.headers).get_json()['data']['chats']) == 1


def test_rental_chat_requires_both_parties(client, make_rental, landowner, farmer, outsider, land_id):
    rental = make_rental(landowner, farmer, land_id)
    resp = open_chat(client, farmer, landowner.id, rentalId=rental['id'])
    assert resp.status_code == 201
    assert resp.get_json()['data']['chat']['chatType'] == 'rental'

    assert open_chat(client, outsider, landowner.id, rentalId=rental['id']).status_code == 403


def test_create_chat_checks_scope_exists(client, landowner, farmer):
    resp = open_chat(client, farmer, landowner.id, landId=9999)
    assert resp.status_code == 404
    assert resp.get_json()['message'] == 'Land not found'

    resp = open_chat(client, farmer, landowner.id, rentalId=9999)
    assert resp.status_code == 404
    assert resp.get_json()['message'] == 'Rental agreement not found'

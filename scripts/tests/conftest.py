import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from datetime import datetime, timedelta
from types import SimpleNamespace

import bcrypt
import pytest

from landrental import create_app
from landrental.config import TestingConfig
from landrental.models import db, User

PASSWORD = 'secret123'


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    # Minimum work factor keeps password hashing out of the test runtime
    real_gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, 'gensalt', lambda rounds=4, prefix=b'2b': real_gensalt(4, prefix))


@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        UPLOAD_FOLDER = tmp_path / 'uploads'
        AGREEMENTS_FOLDER = tmp_path / 'uploads' / 'agreements'

    app = create_app(Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_user(app):
    """Insert a user directly and return its id and bearer headers"""
    counter = {'n': 0}

    def _create(user_type='farmer', name=None, email=None, **extra):
        counter['n'] += 1
        with app.app_context():
            user = User(
                name=name or f'{user_type.title()} {counter["n"]}',
                email=email or f'{user_type}{counter["n"]}@example.com',
                user_type=user_type,
                **extra
            )
            user.set_password(PASSWORD)
            db.session.add(user)
            db.session.commit()
            return SimpleNamespace(
                id=user.id,
                email=user.email,
                headers={'Authorization': f'Bearer {user.generate_auth_token()}'},
            )

    return _create


@pytest.fixture
def landowner(create_user):
    return create_user('landowner', name='Ravi Landowner')


@pytest.fixture
def farmer(create_user):
    return create_user('farmer', name='Meena Farmer', farming_experience=6)


@pytest.fixture
def outsider(create_user):
    return create_user('farmer', name='Outside Farmer')


def land_payload(**overrides):
    payload = {
        'title': 'Paddy field near the river',
        'description': 'Well irrigated alluvial land suitable for paddy and vegetables.',
        'totalAcres': 5,
        'availableAcres': 5,
        'pricePerAcre': 1000,
        'location': {'type': 'Point', 'coordinates': [76.52, 9.59]},
        'address': {'village': 'Kumarakom', 'city': 'Kottayam', 'district': 'Kottayam', 'state': 'Kerala'},
        'soilType': 'alluvial',
        'waterSource': 'canal',
        'irrigationType': 'flood',
        'availableFrom': datetime.utcnow().isoformat(),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_land(client):
    def _make(owner, **overrides):
        resp = client.post('/api/land', json=land_payload(**overrides), headers=owner.headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']['land']['id']

    return _make


@pytest.fixture
def land_id(make_land, landowner):
    return make_land(landowner)


def agreement_payload(land_id, farmer_id, **overrides):
    start = datetime.utcnow() + timedelta(days=7)
    payload = {
        'landId': land_id,
        'farmerId': farmer_id,
        'rentedAcres': 3,
        'pricePerAcre': 1000,
        'startDate': start.isoformat(),
        'endDate': (start + timedelta(days=183)).isoformat(),
        'duration': 6,
        'paymentSchedule': 'monthly',
        'securityDeposit': 2000,
        'terms': {'cropsAllowed': ['rice'], 'restrictions': ['No chemical pesticides']},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_rental(client):
    def _make(owner, farmer, land_id, **overrides):
        resp = client.post(
            '/api/agreement/generate',
            json=agreement_payload(land_id, farmer.id, **overrides),
            headers=owner.headers,
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']['rental']

    return _make


@pytest.fixture
def active_rental(client, make_rental, landowner, farmer, land_id):
    rental = make_rental(landowner, farmer, land_id)
    for party in (landowner, farmer):
        resp = client.post(f"/api/agreement/{rental['id']}/sign",
                           json={'signature': 'signed'}, headers=party.headers)
        assert resp.status_code == 200
    return rental


@pytest.fixture
def land_data():
    return land_payload


@pytest.fixture
def agreement_data():
    return agreement_payload

from datetime import datetime, timedelta

from landrental.models import db, Land, Rental
from landrental.utils.dates import add_months


def test_generate_example_rental(app, client, make_rental, landowner, farmer, land_id):
    rental = make_rental(landowner, farmer, land_id, rentedAcres=3, pricePerAcre=1000, duration=6)

    assert rental['totalAmount'] == 18000
    assert rental['status'] == 'pending'
    assert [p['amount'] for p in rental['payments']] == [3000] * 6
    assert [p['paymentIndex'] for p in rental['payments']] == list(range(6))
    assert all(p['status'] == 'pending' for p in rental['payments'])
    assert rental['agreementDocument']['url'].startswith('/uploads/agreements/')

    with app.app_context():
        land = db.session.get(Land, land_id)
        assert land.available_acres == 2
        assert land.land_status == 'rented'


def test_installments_are_monthly_and_sum_to_total(app, client, make_rental, landowner, farmer, land_id):
    rental = make_rental(landowner, farmer, land_id, rentedAcres=1.3, pricePerAcre=777, duration=7)

    amounts = [p['amount'] for p in rental['payments']]
    assert len(amounts) == 7
    assert abs(sum(amounts) - rental['totalAmount']) < 0.01

    with app.app_context():
        stored = db.session.get(Rental, rental['id'])
        for payment in stored.payments:
            assert payment.due_date == add_months(stored.start_date, payment.installment_index)


def test_generate_rejects_more_acres_than_available(app, client, landowner, farmer, land_id, agreement_data):
    resp = client.post('/api/agreement/generate', headers=landowner.headers,
                       json=agreement_data(land_id, farmer.id, rentedAcres=6))
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Requested acres exceed available acres'

    with app.app_context():
        land = db.session.get(Land, land_id)
        assert land.available_acres == 5
        assert land.land_status == 'available'
        assert Rental.query.count() == 0


def test_generate_validates_dates(client, landowner, farmer, land_id, agreement_data):
    past = datetime.utcnow() - timedelta(days=3)
    resp = client.post('/api/agreement/generate', headers=landowner.headers, json=agreement_data(
        land_id, farmer.id, startDate=past.isoformat(), endDate=(past + timedelta(days=90)).isoformat(),
    ))
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Start date cannot be in the past'

    start = datetime.utcnow() + timedelta(days=10)
    resp = client.post('/api/agreement/generate', headers=landowner.headers, json=agreement_data(
        land_id, farmer.id, startDate=start.isoformat(), endDate=(start - timedelta(days=1)).isoformat(),
    ))
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'End date must be after start date'


def test_generate_rejects_start_earlier_today(client, landowner, farmer, land_id, agreement_data):
    now = datetime.utcnow()
    earlier_today = max(now.replace(hour=0, minute=0, second=0, microsecond=0), now - timedelta(minutes=1))
    resp = client.post('/api/agreement/generate', headers=landowner.headers, json=agreement_data(
        land_id, farmer.id, startDate=earlier_today.isoformat(),
        endDate=(earlier_today + timedelta(days=180)).isoformat(),
    ))
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Start date cannot be in the past'


def test_generate_requires_owner_and_real_farmer(client, landowner, farmer, create_user, land_id, agreement_data):
    other_owner = create_user('landowner')
    resp = client.post('/api/agreement/generate', headers=other_owner.headers,
                       json=agreement_data(land_id, farmer.id))
    assert resp.status_code == 403

    resp = client.post('/api/agreement/generate', headers=landowner.headers,
                       json=agreement_data(land_id, other_owner.id))
    assert resp.status_code == 404
    assert resp.get_json()['message'] == 'Farmer not found'


def test_rented_land_cannot_be_rented_again(client, make_rental, landowner, farmer, land_id, agreement_data):
    make_rental(landowner, farmer, land_id, rentedAcres=2)
    resp = client.post('/api/agreement/generate', headers=landowner.headers,
                       json=agreement_data(land_id, farmer.id, rentedAcres=1))
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Land is not available for rental'


def test_rental_active_only_after_both_signatures(client, make_rental, landowner, farmer, land_id):
    rental = make_rental(landowner, farmer, land_id)
    url = f"/api/agreement/{rental['id']}/sign"

    resp = client.post(url, json={'signature': 'Ravi'}, headers=landowner.headers)
    data = resp.get_json()['data']['rental']
    assert data['status'] == 'pending'
    assert data['agreementDocument']['signedByLandowner'] is True
    assert data['agreementDocument']['signedByFarmer'] is False

    # Signing twice by the same party does not activate it
    resp = client.post(url, json={'signature': 'Ravi'}, headers=landowner.headers)
    assert resp.get_json()['data']['rental']['status'] == 'pending'

    resp = client.post(url, json={'signature': 'Meena'}, headers=farmer.headers)
    assert resp.get_json()['data']['rental']['status'] == 'active'


def test_sign_requires_participant_and_signature(client, make_rental, landowner, farmer, outsider, land_id):
    rental = make_rental(landowner, farmer, land_id)
    url = f"/api/agreement/{rental['id']}/sign"
    assert client.post(url, json={'signature': 'x'}, headers=outsider.headers).status_code == 403
    assert client.post(url, json={'signature': '   '}, headers=farmer.headers).status_code == 400


def test_only_participants_can_view(client, make_rental, landowner, farmer, outsider, land_id):
    rental = make_rental(landowner, farmer, land_id)
    assert client.get(f"/api/agreement/{rental['id']}", headers=farmer.headers).status_code == 200
    assert client.get(f"/api/agreement/{rental['id']}", headers=outsider.headers).status_code == 403
    assert client.get('/api/agreement/9999', headers=farmer.headers).status_code == 404


def test_cancel_active_rental_restores_acreage(app, client, active_rental, farmer, land_id):
    resp = client.post(f"/api/agreement/{active_rental['id']}/cancel", headers=farmer.headers,
                       json={'reason': 'Family emergency, cannot farm this season'})
    assert resp.status_code == 200
    rental = resp.get_json()['data']['rental']
    assert rental['status'] == 'cancelled'
    assert all(p['status'] == 'cancelled' for p in rental['payments'])

    with app.app_context():
        land = db.session.get(Land, land_id)
        assert land.available_acres == 5
        assert land.land_status == 'available'

    # A cancelled agreement stays cancelled
    resp = client.post(f"/api/agreement/{active_rental['id']}/cancel", headers=farmer.headers,
                       json={'reason': 'Trying to cancel a second time'})
    assert resp.status_code == 400


def test_cancel_pending_rental_keeps_acreage(app, client, make_rental, landowner, farmer, land_id):
    rental = make_rental(landowner, farmer, land_id)
    resp = client.post(f"/api/agreement/{rental['id']}/cancel", headers=landowner.headers,
                       json={'reason': 'Farmer withdrew before signing'})
    assert resp.status_code == 200

    with app.app_context():
        land = db.session.get(Land, land_id)
        assert land.available_acres == 2
        assert land.land_status == 'rented'


def test_cancel_reason_length(client, active_rental, farmer):
    resp = client.post(f"/api/agreement/{active_rental['id']}/cancel", headers=farmer.headers,
                       json={'reason': 'short'})
    assert resp.status_code == 400


def test_my_rentals_status_filter(client, active_rental, make_land, make_rental, landowner, farmer):
    other_land = make_land(landowner, title='Second parcel for rent')
    make_rental(landowner, farmer, other_land, rentedAcres=1)

    resp = client.get('/api/agreement/my-rentals?status=active', headers=farmer.headers)
    rentals = resp.get_json()['data']['rentals']
    assert [r['id'] for r in rentals] == [active_rental['id']]

    resp = client.get('/api/agreement/my-rentals', headers=landowner.headers)
    assert resp.get_json()['data']['pagination']['totalItems'] == 2


def test_dispute_moves_active_rental_to_disputed(client, active_rental, farmer):
    resp = client.post(f"/api/agreement/{active_rental['id']}/dispute", headers=farmer.headers,
                       json={'issue': 'Water supply blocked', 'description': 'Canal gate closed by owner'})
    assert resp.status_code == 201
    rental = resp.get_json()['data']['rental']
    assert rental['status'] == 'disputed'
    assert rental['disputes'][0]['issue'] == 'Water supply blocked'
    assert rental['disputes'][0]['raisedBy'] == farmer.id


def test_agreement_document_download(client, make_rental, landowner, farmer, outsider, land_id):
    rental = make_rental(landowner, farmer, land_id)
    url = f"/api/agreement/{rental['id']}/document"

    resp = client.get(url, headers=farmer.headers)
    assert resp.status_code == 200
    assert resp.mimetype == 'application/pdf'
    assert resp.data.startswith(b'%PDF')

    assert client.get(url, headers=outsider.headers).status_code == 403

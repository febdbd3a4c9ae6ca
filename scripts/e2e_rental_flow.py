# End-to-end smoke run of the rental flow against the configured database
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from datetime import datetime, timedelta

from landrental import create_app, DEMO_PASSWORD

app = create_app()
client = app.test_client()


def login(email):
    r = client.post('/api/auth/login', json={'email': email, 'password': DEMO_PASSWORD})
    print(f'Login {email}:', r.status_code)
    body = r.get_json()
    return {'Authorization': f"Bearer {body['data']['token']}"}, body['data']['user']


owner_headers, owner = login('landowner@demo.com')
farmer_headers, farmer = login('farmer@demo.com')

# Landowner lists a parcel
land_resp = client.post('/api/land', headers=owner_headers, json={
    'title': 'E2E Test Parcel ' + datetime.utcnow().strftime('%H%M%S'),
    'description': 'Parcel created by the end-to-end rental flow script.',
    'totalAcres': 5,
    'availableAcres': 5,
    'pricePerAcre': 1000,
    'location': {'type': 'Point', 'coordinates': [76.52, 9.59]},
    'address': {'village': 'Test Village', 'city': 'Kottayam', 'state': 'Kerala'},
    'soilType': 'alluvial',
    'waterSource': 'canal',
    'availableFrom': datetime.utcnow().isoformat(),
})
print('Create land:', land_resp.status_code)
land_id = land_resp.get_json()['data']['land']['id']

# Farmer finds it nearby and inquires
search = client.get('/api/land?latitude=9.6&longitude=76.5&radius=10')
print('Nearby lands:', [l['id'] for l in search.get_json()['data']['lands']])
inquiry = client.post(f'/api/land/{land_id}/inquire', headers=farmer_headers,
                      json={'message': 'Is this land available from next month?'})
print('Inquiry:', inquiry.status_code, inquiry.get_json())

# Landowner generates the agreement, both sign
start = datetime.utcnow() + timedelta(days=7)
gen = client.post('/api/agreement/generate', headers=owner_headers, json={
    'landId': land_id,
    'farmerId': farmer['id'],
    'rentedAcres': 3,
    'pricePerAcre': 1000,
    'startDate': start.isoformat(),
    'endDate': (start + timedelta(days=180)).isoformat(),
    'duration': 6,
    'paymentSchedule': 'monthly',
})
print('Generate agreement:', gen.status_code)
rental = gen.get_json()['data']['rental']
print('  total:', rental['totalAmount'], 'installments:', [p['amount'] for p in rental['payments']])

for headers in (owner_headers, farmer_headers):
    r = client.post(f"/api/agreement/{rental['id']}/sign", headers=headers, json={'signature': 'signed'})
    print('Sign:', r.status_code, r.get_json()['data']['rental']['status'])

pay = client.post('/api/payment/process', headers=farmer_headers, json={
    'rentalId': rental['id'],
    'paymentIndex': 0,
    'amount': rental['payments'][0]['amount'],
    'paymentMethod': 'online',
})
print('Pay first installment:', pay.status_code, pay.get_json())

schedule = client.get(f"/api/payment/{rental['id']}/schedule", headers=owner_headers)
print('Schedule statistics:', schedule.get_json()['data']['statistics'])

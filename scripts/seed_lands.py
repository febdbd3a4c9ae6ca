# Sample Land Listing Generator
import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from landrental import create_app, DEMO_PASSWORD
from landrental.models import db, Land, User
from datetime import datetime
import random

app = create_app()

LANDS_DATA = [
    {
        'title': 'Fertile Paddy Field near Kumarakom',
        'description': 'Low-lying alluvial paddy land with canal access, suited for two rice seasons a year.',
        'total_acres': 6.0,
        'price_per_acre': 1200,
        'coordinates': (76.4290, 9.6177),
        'village': 'Kumarakom', 'city': 'Kottayam', 'district': 'Kottayam', 'state': 'Kerala',
        'soil_type': 'alluvial', 'water_source': 'canal', 'irrigation_type': 'flood',
        'preferred_crops': ['rice'],
    },
    {
        'title': 'Coconut and Banana Plot',
        'description': 'Red soil plot with a borewell and drip lines already laid, ideal for banana or vegetables.',
        'total_acres': 3.5,
        'price_per_acre': 1500,
        'coordinates': (76.6548, 10.7867),
        'village': 'Alathur', 'city': 'Palakkad', 'district': 'Palakkad', 'state': 'Kerala',
        'soil_type': 'red', 'water_source': 'borewell', 'irrigation_type': 'drip',
        'preferred_crops': ['banana', 'coconut'],
    },
    {
        'title': 'Black Cotton Soil Farm',
        'description': 'Deep black soil farm with well irrigation, good for cotton, soybean and pulses.',
        'total_acres': 12.0,
        'price_per_acre': 900,
        'coordinates': (75.7139, 21.0077),
        'village': 'Savda', 'city': 'Jalgaon', 'district': 'Jalgaon', 'state': 'Maharashtra',
        'soil_type': 'black', 'water_source': 'well', 'irrigation_type': 'sprinkler',
        'preferred_crops': ['cotton', 'soybean'],
    },
    {
        'title': 'Rainfed Millet Land',
        'description': 'Laterite upland used for millets and groundnut during the monsoon season.',
        'total_acres': 8.0,
        'price_per_acre': 500,
        'coordinates': (77.5946, 12.9716),
        'village': 'Hoskote', 'city': 'Bengaluru Rural', 'district': 'Bengaluru Rural', 'state': 'Karnataka',
        'soil_type': 'laterite', 'water_source': 'rainfed', 'irrigation_type': 'none',
        'preferred_crops': ['ragi', 'groundnut'],
    },
]


def seed_lands():
    with app.app_context():
        # First, ensure we have a landowner
        owner = User.query.filter_by(user_type='landowner').first()
        if not owner:
            print("No landowner found. Creating one...")
            owner = User(
                name='Sample Landowner',
                email='owner1@example.com',
                user_type='landowner',
                is_active=True
            )
            owner.set_password(DEMO_PASSWORD)
            db.session.add(owner)
            db.session.commit()
            print("Landowner created.")

        print("Seeding land listings...")

        for data in LANDS_DATA:
            if Land.query.filter_by(title=data['title']).first():
                print(f"Skipped (already exists): {data['title']}")
                continue

            longitude, latitude = data['coordinates']
            land = Land(
                owner_id=owner.id,
                title=data['title'],
                description=data['description'],
                total_acres=data['total_acres'],
                available_acres=data['total_acres'],
                price_per_acre=data['price_per_acre'],
                latitude=latitude,
                longitude=longitude,
                village=data['village'],
                city=data['city'],
                district=data['district'],
                state=data['state'],
                soil_type=data['soil_type'],
                water_source=data['water_source'],
                irrigation_type=data['irrigation_type'],
                preferred_crops=data['preferred_crops'],
                security_deposit=random.choice([0, 2000, 5000]),
                available_from=datetime.utcnow(),
            )
            db.session.add(land)
            print(f"Added: {data['title']}")

        db.session.commit()
        print("Seeding complete!")


if __name__ == '__main__':
    seed_lands()

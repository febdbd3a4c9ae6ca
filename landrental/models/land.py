# Land Listing Models
from landrental.models.user import db
from landrental.utils.dates import to_iso
from datetime import datetime

SOIL_TYPES = ('alluvial', 'black', 'red', 'laterite', 'mountain', 'desert', 'other')
WATER_SOURCES = ('well', 'borewell', 'canal', 'river', 'lake', 'rainfed', 'other')
IRRIGATION_TYPES = ('drip', 'sprinkler', 'flood', 'manual', 'none')
LAND_STATUSES = ('available', 'rented', 'underNegotiation', 'maintenance')
LAND_PAYMENT_SCHEDULES = ('monthly', 'quarterly', 'halfYearly', 'yearly')
CONTACT_PREFERENCES = ('phone', 'email', 'both')

# Address columns matched by free-text search
SEARCHABLE_ADDRESS_FIELDS = ('village', 'city', 'district')


class Land(db.Model):
    __tablename__ = 'lands'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)

    # Acreage and price
    total_acres = db.Column(db.Float, nullable=False)
    available_acres = db.Column(db.Float, nullable=False)
    price_per_acre = db.Column(db.Float, nullable=False, index=True)

    # Location (WGS84)
    latitude = db.Column(db.Float, nullable=False, index=True)
    longitude = db.Column(db.Float, nullable=False, index=True)
    street = db.Column(db.String(200))
    village = db.Column(db.String(100))
    city = db.Column(db.String(100))
    district = db.Column(db.String(100))
    state = db.Column(db.String(100))
    pincode = db.Column(db.String(10))
    country = db.Column(db.String(60), default='India')

    # Characteristics
    soil_type = db.Column(db.String(20), nullable=False)
    water_source = db.Column(db.String(20), nullable=False)
    irrigation_type = db.Column(db.String(20), default='none', nullable=False)
    land_status = db.Column(db.String(20), default='available', nullable=False, index=True)

    land_documents = db.Column(db.JSON, default=list)
    images = db.Column(db.JSON, default=list)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)

    # Rental terms offered by the owner
    minimum_duration = db.Column(db.Integer, default=1, nullable=False)
    maximum_duration = db.Column(db.Integer, default=12, nullable=False)
    payment_schedule = db.Column(db.String(20), default='monthly', nullable=False)
    security_deposit = db.Column(db.Float, default=0.0, nullable=False)

    restrictions = db.Column(db.JSON, default=list)
    preferred_crops = db.Column(db.JSON, default=list)
    contact_preference = db.Column(db.String(10), default='both', nullable=False)
    available_from = db.Column(db.DateTime, nullable=False)
    available_to = db.Column(db.DateTime)

    # Statistics
    views = db.Column(db.Integer, default=0, nullable=False)
    inquiries = db.Column(db.Integer, default=0, nullable=False)
    rating = db.Column(db.Float, default=0.0, nullable=False)  # running average
    total_ratings = db.Column(db.Integer, default=0, nullable=False)

    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    is_featured = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship('User', backref='lands')

    def is_available(self):
        return self.is_active and self.land_status == 'available'

    def increment_views(self):
        # Single UPDATE so concurrent readers do not lose increments
        Land.query.filter_by(id=self.id).update({Land.views: Land.views + 1})

    def increment_inquiries(self):
        Land.query.filter_by(id=self.id).update({Land.inquiries: Land.inquiries + 1})

    def add_rating(self, value):
        total = self.rating * self.total_ratings + value
        self.total_ratings += 1
        self.rating = total / self.total_ratings

    @property
    def total_price(self):
        return self.available_acres * self.price_per_acre

    @property
    def address(self):
        return {
            'street': self.street,
            'village': self.village,
            'city': self.city,
            'district': self.district,
            'state': self.state,
            'pincode': self.pincode,
            'country': self.country,
        }

    @property
    def location_label(self):
        parts = [self.village, self.city, self.state]
        return ', '.join(p for p in parts if p) or 'N/A'

    def to_summary(self):
        return {
            'id': self.id,
            'title': self.title,
            'address': self.address,
            'totalAcres': self.total_acres,
            'availableAcres': self.available_acres,
            'pricePerAcre': self.price_per_acre,
            'soilType': self.soil_type,
            'waterSource': self.water_source,
            'landStatus': self.land_status,
        }

    def to_dict(self, distance_km=None):
        data = self.to_summary()
        data.update({
            'owner': self.owner.to_summary() if self.owner else None,
            'description': self.description,
            'location': {'type': 'Point', 'coordinates': [self.longitude, self.latitude]},
            'irrigationType': self.irrigation_type,
            'landDocuments': self.land_documents or [],
            'images': self.images or [],
            'isVerified': self.is_verified,
            'rentalTerms': {
                'minimumDuration': self.minimum_duration,
                'maximumDuration': self.maximum_duration,
                'paymentSchedule': self.payment_schedule,
                'securityDeposit': self.security_deposit,
            },
            'restrictions': self.restrictions or [],
            'preferredCrops': self.preferred_crops or [],
            'contactPreference': self.contact_preference,
            'availableFrom': to_iso(self.available_from),
            'availableTo': to_iso(self.available_to),
            'views': self.views,
            'inquiries': self.inquiries,
            'rating': round(self.rating or 0, 2),
            'totalRatings': self.total_ratings,
            'totalPrice': self.total_price,
            'isActive': self.is_active,
            'isFeatured': self.is_featured,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        })
        if distance_km is not None:
            data['distanceKm'] = round(distance_km, 2)
        return data

    def __repr__(self):
        return f'<Land {self.id} - {self.title}>'

# User Model
from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
import bcrypt
from datetime import datetime

from landrental.utils.dates import to_iso

db = SQLAlchemy()

USER_TYPES = ('farmer', 'landowner')
DOCUMENT_TYPES = ('landDeed', 'propertyTax', 'surveyReport', 'other')

TOKEN_SALT = 'landrental-auth-token'


def _token_serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    user_type = db.Column(db.String(20), nullable=False, index=True)  # farmer, landowner
    phone = db.Column(db.String(20))

    # Address
    street = db.Column(db.String(200))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    pincode = db.Column(db.String(10))

    # For Farmer
    farming_experience = db.Column(db.Integer)  # in years
    preferred_crops = db.Column(db.JSON, default=list)

    # Bank details for rent collection
    bank_account_number = db.Column(db.String(30))
    bank_ifsc_code = db.Column(db.String(20))
    bank_account_holder = db.Column(db.String(100))

    profile_image = db.Column(db.String(255))
    rating = db.Column(db.Float, default=0.0, nullable=False)  # running average
    total_ratings = db.Column(db.Integer, default=0, nullable=False)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    land_documents = db.Column(db.JSON, default=list)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def set_password(self, password):
        """Hash and set password using bcrypt"""
        salt = bcrypt.gensalt()
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash using bcrypt"""
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    def generate_auth_token(self):
        """Signed bearer token carrying the user id"""
        return _token_serializer().dumps({'uid': self.id})

    @staticmethod
    def verify_auth_token(token):
        """Return the active user for a bearer token, or None"""
        try:
            payload = _token_serializer().loads(
                token, max_age=current_app.config['AUTH_TOKEN_MAX_AGE']
            )
        except (BadSignature, SignatureExpired):
            return None
        user = db.session.get(User, payload.get('uid'))
        if user is None or not user.is_active:
            return None
        return user

    def is_farmer(self):
        return self.user_type == 'farmer'

    def is_landowner(self):
        return self.user_type == 'landowner'

    def add_rating(self, value):
        total = self.rating * self.total_ratings + value
        self.total_ratings += 1
        self.rating = total / self.total_ratings

    @property
    def address(self):
        return {
            'street': self.street,
            'city': self.city,
            'state': self.state,
            'pincode': self.pincode,
        }

    def to_summary(self):
        """Compact form embedded in lands, rentals and chats"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'userType': self.user_type,
            'rating': round(self.rating or 0, 2),
            'totalRatings': self.total_ratings,
            'profileImage': self.profile_image,
        }

    def to_public_dict(self):
        data = self.to_summary()
        data.update({
            'address': self.address,
            'farmingExperience': self.farming_experience,
            'preferredCrops': self.preferred_crops or [],
            'isVerified': self.is_verified,
        })
        return data

    def to_private_dict(self):
        data = self.to_public_dict()
        data.update({
            'bankDetails': {
                'accountNumber': self.bank_account_number,
                'ifscCode': self.bank_ifsc_code,
                'accountHolderName': self.bank_account_holder,
            },
            'landDocuments': self.land_documents or [],
            'isActive': self.is_active,
            'createdAt': to_iso(self.created_at),
            'lastLogin': to_iso(self.last_login),
        })
        return data

    def __repr__(self):
        return f'<User {self.email} ({self.user_type})>'

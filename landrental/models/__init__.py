# Database Models
from landrental.models.user import db, User
from landrental.models.land import Land
from landrental.models.rental import Rental, RentalPayment, RentalDispute
from landrental.models.chat import Chat, ChatMessage

__all__ = [
    'db', 'User', 'Land',
    'Rental', 'RentalPayment', 'RentalDispute',
    'Chat', 'ChatMessage'
]

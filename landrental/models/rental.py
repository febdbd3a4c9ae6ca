# Rental Agreement and Payment Models
from landrental.models.user import db
from landrental.utils.dates import to_iso, add_months, days_between
from datetime import datetime
import uuid

RENTAL_STATUSES = ('pending', 'active', 'completed', 'cancelled', 'disputed')
PAYMENT_STATUSES = ('pending', 'paid', 'overdue', 'cancelled')
PAYMENT_METHODS = ('online', 'cash', 'bankTransfer', 'cheque')
RENTAL_PAYMENT_SCHEDULES = ('monthly', 'quarterly', 'halfYearly', 'yearly', 'oneTime')
MAINTENANCE_OPTIONS = ('landowner', 'farmer', 'shared')
UTILITY_OPTIONS = ('included', 'separate', 'notAvailable')
DISPUTE_STATUSES = ('open', 'underReview', 'resolved', 'closed')

# Allowed difference between a submitted payment and the installment amount
PAYMENT_TOLERANCE = 0.01


class Rental(db.Model):
    __tablename__ = 'rentals'
    __table_args__ = (
        db.Index('ix_rentals_landowner_status', 'landowner_id', 'status'),
        db.Index('ix_rentals_farmer_status', 'farmer_id', 'status'),
        db.Index('ix_rentals_land_status', 'land_id', 'status'),
    )

    id = db.Column(db.Integer, primary_key=True)
    land_id = db.Column(db.Integer, db.ForeignKey('lands.id', ondelete='SET NULL'))
    landowner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    farmer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    rented_acres = db.Column(db.Float, nullable=False)
    price_per_acre = db.Column(db.Float, nullable=False)
    total_amount = db.Column(db.Float, nullable=False)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # months

    payment_schedule = db.Column(db.String(20), nullable=False)
    security_deposit = db.Column(db.Float, default=0.0, nullable=False)
    status = db.Column(db.String(20), default='pending', nullable=False)

    # Terms
    crops_allowed = db.Column(db.JSON, default=list)
    restrictions = db.Column(db.JSON, default=list)
    maintenance = db.Column(db.String(20), default='farmer', nullable=False)
    utilities = db.Column(db.String(20), default='notAvailable', nullable=False)

    # Agreement document
    agreement_url = db.Column(db.String(255))
    agreement_generated_at = db.Column(db.DateTime)
    signed_by_landowner = db.Column(db.Boolean, default=False, nullable=False)
    signed_by_farmer = db.Column(db.Boolean, default=False, nullable=False)

    cancellation_reason = db.Column(db.Text)
    cancelled_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    land = db.relationship('Land', backref='rentals')
    landowner = db.relationship('User', foreign_keys=[landowner_id], backref='rentals_as_landowner')
    farmer = db.relationship('User', foreign_keys=[farmer_id], backref='rentals_as_farmer')
    payments = db.relationship(
        'RentalPayment',
        back_populates='rental',
        order_by='RentalPayment.installment_index',
        cascade='all, delete-orphan',
    )
    disputes = db.relationship(
        'RentalDispute',
        back_populates='rental',
        order_by='RentalDispute.created_at',
        cascade='all, delete-orphan',
    )

    # ---------- participants ----------

    def is_participant(self, user_id):
        return user_id in (self.landowner_id, self.farmer_id)

    def role_of(self, user_id):
        if user_id == self.landowner_id:
            return 'landowner'
        if user_id == self.farmer_id:
            return 'farmer'
        return None

    # ---------- schedule ----------

    def calculate_payments(self):
        """
        Build the monthly installment schedule.

        totalAmount is split evenly across `duration` installments due on the
        start date and every following month. Amounts are rounded to cents and
        the last installment takes the rounding remainder.
        """
        base_amount = round(self.total_amount / self.duration, 2)
        self.payments = []
        for index in range(self.duration):
            if index == self.duration - 1:
                amount = round(self.total_amount - base_amount * (self.duration - 1), 2)
            else:
                amount = base_amount
            self.payments.append(RentalPayment(
                installment_index=index,
                amount=amount,
                due_date=add_months(self.start_date, index),
                status='pending',
            ))
        return self.payments

    def payment_at(self, index):
        for payment in self.payments:
            if payment.installment_index == index:
                return payment
        return None

    def mark_payment_as_paid(self, index, payment_method, transaction_id=None, notes=None):
        payment = self.payment_at(index)
        if payment is None:
            raise LookupError(f'Installment {index} not found')
        payment.status = 'paid'
        payment.paid_date = datetime.utcnow()
        payment.payment_method = payment_method
        payment.transaction_id = transaction_id or f'TXN-{uuid.uuid4().hex[:12].upper()}'
        payment.notes = notes
        if self.all_payments_paid():
            self.status = 'completed'
            self.completed_at = datetime.utcnow()
        return payment

    def all_payments_paid(self):
        return bool(self.payments) and all(p.status == 'paid' for p in self.payments)

    def cancel_open_payments(self):
        for payment in self.payments:
            if payment.status in ('pending', 'overdue'):
                payment.status = 'cancelled'

    # ---------- signatures ----------

    def sign(self, role):
        if role == 'landowner':
            self.signed_by_landowner = True
        elif role == 'farmer':
            self.signed_by_farmer = True
        else:
            raise ValueError(f'Unknown signer role: {role}')
        if self.signed_by_landowner and self.signed_by_farmer:
            self.status = 'active'

    # ---------- derived values ----------

    @property
    def paid_amount(self):
        return round(sum(p.amount for p in self.payments if p.status == 'paid'), 2)

    @property
    def remaining_amount(self):
        return round(self.total_amount - self.paid_amount, 2)

    @property
    def next_payment_due(self):
        open_payments = [p for p in self.payments if p.status in ('pending', 'overdue')]
        if not open_payments:
            return None
        return min(open_payments, key=lambda p: p.due_date)

    @property
    def days_remaining(self):
        return max(days_between(datetime.utcnow(), self.end_date), 0)

    def to_summary(self):
        return {
            'id': self.id,
            'rentedAcres': self.rented_acres,
            'totalAmount': self.total_amount,
            'status': self.status,
        }

    def to_dict(self, include_payments=True):
        next_due = self.next_payment_due
        data = {
            'id': self.id,
            'land': self.land.to_summary() if self.land else None,
            'landowner': self.landowner.to_summary() if self.landowner else None,
            'farmer': self.farmer.to_summary() if self.farmer else None,
            'rentedAcres': self.rented_acres,
            'pricePerAcre': self.price_per_acre,
            'totalAmount': self.total_amount,
            'startDate': to_iso(self.start_date),
            'endDate': to_iso(self.end_date),
            'duration': self.duration,
            'paymentSchedule': self.payment_schedule,
            'securityDeposit': self.security_deposit,
            'status': self.status,
            'terms': {
                'cropsAllowed': self.crops_allowed or [],
                'restrictions': self.restrictions or [],
                'maintenance': self.maintenance,
                'utilities': self.utilities,
            },
            'agreementDocument': {
                'url': self.agreement_url,
                'generatedAt': to_iso(self.agreement_generated_at),
                'signedByLandowner': self.signed_by_landowner,
                'signedByFarmer': self.signed_by_farmer,
            },
            'cancellationReason': self.cancellation_reason,
            'remainingAmount': self.remaining_amount,
            'nextPaymentDue': next_due.to_dict() if next_due else None,
            'daysRemaining': self.days_remaining,
            'disputes': [d.to_dict() for d in self.disputes],
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }
        if include_payments:
            data['payments'] = [p.to_dict() for p in self.payments]
        return data

    def __repr__(self):
        return f'<Rental {self.id} - Land {self.land_id} ({self.status})>'


class RentalPayment(db.Model):
    __tablename__ = 'rental_payments'
    __table_args__ = (
        db.UniqueConstraint('rental_id', 'installment_index', name='uq_rental_installment'),
    )

    id = db.Column(db.Integer, primary_key=True)
    rental_id = db.Column(db.Integer, db.ForeignKey('rentals.id'), nullable=False, index=True)
    installment_index = db.Column(db.Integer, nullable=False)  # zero-based
    amount = db.Column(db.Float, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    paid_date = db.Column(db.DateTime)
    status = db.Column(db.String(20), default='pending', nullable=False)
    payment_method = db.Column(db.String(20), default='online', nullable=False)
    transaction_id = db.Column(db.String(100))
    notes = db.Column(db.Text)

    rental = db.relationship('Rental', back_populates='payments')

    def is_overdue(self, now=None):
        now = now or datetime.utcnow()
        return self.status in ('pending', 'overdue') and self.due_date < now

    def to_dict(self):
        return {
            'paymentIndex': self.installment_index,
            'amount': self.amount,
            'dueDate': to_iso(self.due_date),
            'paidDate': to_iso(self.paid_date),
            'status': self.status,
            'paymentMethod': self.payment_method,
            'transactionId': self.transaction_id,
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<RentalPayment {self.rental_id}#{self.installment_index} ({self.status})>'


class RentalDispute(db.Model):
    __tablename__ = 'rental_disputes'

    id = db.Column(db.Integer, primary_key=True)
    rental_id = db.Column(db.Integer, db.ForeignKey('rentals.id'), nullable=False, index=True)
    raised_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    issue = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), default='open', nullable=False)
    resolution = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    resolved_at = db.Column(db.DateTime)

    rental = db.relationship('Rental', back_populates='disputes')
    raised_by = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'raisedBy': self.raised_by_id,
            'issue': self.issue,
            'description': self.description,
            'status': self.status,
            'resolution': self.resolution,
            'createdAt': to_iso(self.created_at),
            'resolvedAt': to_iso(self.resolved_at),
        }

# Rental Payment Routes
import logging
from datetime import datetime

from flask import Blueprint
from flask_login import login_required, current_user

from landrental.errors import ValidationError, AuthorizationError, StateConflictError
from landrental.models import db, Rental, RentalPayment
from landrental.models.rental import PAYMENT_TOLERANCE
from landrental.routes.agreement import get_rental_for_participant
from landrental.schemas import ProcessPaymentRequest, ReminderRequest, PaymentListParams, PageParams
from landrental.utils.api import success, parse_body, parse_query, pagination_meta
from landrental.utils.dates import days_between

logger = logging.getLogger(__name__)

payment_bp = Blueprint('payment', __name__)


def _payments_for_current_user():
    return RentalPayment.query.join(Rental).filter(db.or_(
        Rental.landowner_id == current_user.id,
        Rental.farmer_id == current_user.id,
    ))


def _payment_entry(payment, now=None):
    """Installment plus the rental it belongs to, for cross-rental listings"""
    rental = payment.rental
    land = rental.land
    entry = payment.to_dict()
    entry.update({
        'rentalId': rental.id,
        'rentalStatus': rental.status,
        'rentalTitle': land.title if land else None,
        'rentalLocation': land.location_label if land else None,
    })
    if now is not None:
        entry['daysOverdue'] = days_between(payment.due_date, now)
    return entry


@payment_bp.route('/process', methods=['POST'])
@login_required
def process_payment():
    data = parse_body(ProcessPaymentRequest)
    rental = get_rental_for_participant(data.rental_id, action='make payments for', lock=True)

    if rental.status != 'active':
        raise StateConflictError('Payments can only be made for active rentals')

    payment = rental.payment_at(data.payment_index)
    if payment is None:
        raise ValidationError('Invalid payment index')
    if payment.status == 'paid':
        raise StateConflictError('Payment has already been made')
    if payment.status == 'cancelled':
        raise StateConflictError('Payment has been cancelled')
    if abs(data.amount - payment.amount) > PAYMENT_TOLERANCE:
        raise ValidationError(f'Payment amount must be Rs. {payment.amount:.2f}')

    rental.mark_payment_as_paid(
        data.payment_index,
        data.payment_method,
        transaction_id=data.transaction_id,
        notes=data.notes,
    )
    db.session.commit()

    logger.info('Rental %s installment %s paid via %s (%s)',
                rental.id, data.payment_index, data.payment_method, payment.transaction_id)
    return success({
        'payment': payment.to_dict(),
        'rentalStatus': rental.status,
        'remainingAmount': rental.remaining_amount,
    }, message='Payment processed successfully')


@payment_bp.route('/<int:rental_id>/schedule')
@login_required
def payment_schedule(rental_id):
    rental = get_rental_for_participant(rental_id, action='view the payment schedule of')
    now = datetime.utcnow()
    payments = rental.payments

    paid = [p for p in payments if p.status == 'paid']
    pending = [p for p in payments if p.status in ('pending', 'overdue')]
    next_due = rental.next_payment_due

    return success({
        'rental': {
            'id': rental.id,
            'status': rental.status,
            'totalAmount': rental.total_amount,
            'remainingAmount': rental.remaining_amount,
            'nextPaymentDue': next_due.to_dict() if next_due else None,
            'daysRemaining': rental.days_remaining,
        },
        'payments': [p.to_dict() for p in payments],
        'statistics': {
            'totalPayments': len(payments),
            'paidPayments': len(paid),
            'pendingPayments': len(pending),
            'overduePayments': sum(1 for p in pending if p.is_overdue(now)),
            'cancelledPayments': sum(1 for p in payments if p.status == 'cancelled'),
            'totalPaid': round(sum(p.amount for p in paid), 2),
            'totalPending': round(sum(p.amount for p in pending), 2),
        },
    })


@payment_bp.route('/my-payments')
@login_required
def my_payments():
    params = parse_query(PaymentListParams)
    query = _payments_for_current_user()
    if params.status:
        query = query.filter(RentalPayment.status == params.status)

    total = query.count()
    payments = (query.order_by(RentalPayment.due_date.desc(), RentalPayment.id.desc())
                .offset((params.page - 1) * params.limit)
                .limit(params.limit)
                .all())
    return success({
        'payments': [_payment_entry(p) for p in payments],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@payment_bp.route('/overdue')
@login_required
def overdue_payments():
    params = parse_query(PageParams)
    now = datetime.utcnow()
    query = _payments_for_current_user().filter(
        Rental.status == 'active',
        RentalPayment.status.in_(('pending', 'overdue')),
        RentalPayment.due_date < now,
    )

    total = query.count()
    # Oldest due date is the most overdue
    payments = (query.order_by(RentalPayment.due_date.asc(), RentalPayment.id.asc())
                .offset((params.page - 1) * params.limit)
                .limit(params.limit)
                .all())
    return success({
        'payments': [_payment_entry(p, now=now) for p in payments],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@payment_bp.route('/<int:rental_id>/reminder', methods=['POST'])
@login_required
def send_reminder(rental_id):
    data = parse_body(ReminderRequest)
    rental = get_rental_for_participant(rental_id, action='send reminders for')
    if rental.landowner_id != current_user.id:
        raise AuthorizationError('Only the landowner can send payment reminders')

    payment = rental.payment_at(data.payment_index)
    if payment is None:
        raise ValidationError('Invalid payment index')
    if payment.status not in ('pending', 'overdue'):
        raise StateConflictError('Can only send reminders for pending payments')

    # No e-mail/SMS channel; the reminder is only logged
    logger.info('Payment reminder for rental %s installment %s to farmer %s: %s',
                rental.id, data.payment_index, rental.farmer_id, data.message or '')
    return success({
        'reminder': {
            'rentalId': rental.id,
            'paymentIndex': payment.installment_index,
            'farmerId': rental.farmer_id,
            'amount': payment.amount,
            'dueDate': payment.to_dict()['dueDate'],
            'message': data.message,
        },
    }, message='Payment reminder sent successfully')

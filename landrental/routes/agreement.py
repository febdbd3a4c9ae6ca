# Rental Agreement Routes
import logging
from datetime import datetime

from flask import Blueprint, current_app, send_file
from flask_login import login_required, current_user

from landrental.errors import (
    ValidationError, AuthorizationError, NotFoundError, StateConflictError,
)
from landrental.models import db, User, Land, Rental, RentalDispute
from landrental.schemas import (
    GenerateAgreementRequest, SignRequest, CancelRequest, DisputeRequest, MyRentalsParams,
)
from landrental.utils.api import success, parse_body, parse_query, pagination_meta
from landrental.utils.reports import generate_agreement_pdf, agreement_file_path

logger = logging.getLogger(__name__)

agreement_bp = Blueprint('agreement', __name__)


def get_rental_for_participant(rental_id, action='view', lock=False):
    """Load a rental the current user takes part in"""
    query = Rental.query.filter_by(id=rental_id)
    if lock:
        query = query.with_for_update()
    rental = query.first()
    if rental is None:
        raise NotFoundError('Rental agreement not found')
    if not rental.is_participant(current_user.id):
        raise AuthorizationError(f'You are not authorized to {action} this agreement')
    return rental


@agreement_bp.route('/generate', methods=['POST'])
@login_required
def generate_agreement():
    data = parse_body(GenerateAgreementRequest)

    if data.start_date >= data.end_date:
        raise ValidationError('End date must be after start date')
    if data.start_date < datetime.utcnow():
        raise ValidationError('Start date cannot be in the past')

    land = db.session.get(Land, data.land_id, with_for_update=True)
    if land is None:
        raise NotFoundError('Land not found')
    if land.owner_id != current_user.id:
        raise AuthorizationError('Only the landowner can generate agreements')
    if not land.is_available():
        raise StateConflictError('Land is not available for rental')
    if data.rented_acres > land.available_acres:
        raise ValidationError('Requested acres exceed available acres')

    farmer = db.session.get(User, data.farmer_id)
    if farmer is None or not farmer.is_active or not farmer.is_farmer():
        raise NotFoundError('Farmer not found')

    rental = Rental(
        land=land,
        landowner_id=current_user.id,
        farmer=farmer,
        rented_acres=data.rented_acres,
        price_per_acre=data.price_per_acre,
        total_amount=round(data.rented_acres * data.price_per_acre * data.duration, 2),
        start_date=data.start_date,
        end_date=data.end_date,
        duration=data.duration,
        payment_schedule=data.payment_schedule,
        security_deposit=data.security_deposit,
        status='pending',
        crops_allowed=data.terms.crops_allowed,
        restrictions=data.terms.restrictions,
        maintenance=data.terms.maintenance,
        utilities=data.terms.utilities,
    )
    rental.calculate_payments()
    db.session.add(rental)

    land.available_acres = round(land.available_acres - data.rented_acres, 4)
    land.land_status = 'rented'

    # The rental, its installments, the land update and the document
    # reference commit together; a rendering failure rolls all of it back.
    db.session.flush()
    rental.agreement_url = generate_agreement_pdf(
        rental, land, farmer, land.owner, current_app.config['AGREEMENTS_FOLDER']
    )
    rental.agreement_generated_at = datetime.utcnow()
    db.session.commit()

    logger.info('Rental %s generated for land %s (%s acres, farmer %s)',
                rental.id, land.id, rental.rented_acres, farmer.id)
    return success(
        {'rental': rental.to_dict()},
        message='Rental agreement generated successfully',
        status=201,
    )


@agreement_bp.route('/my-rentals')
@login_required
def my_rentals():
    params = parse_query(MyRentalsParams)
    query = Rental.query.filter(db.or_(
        Rental.landowner_id == current_user.id,
        Rental.farmer_id == current_user.id,
    ))
    if params.status:
        query = query.filter(Rental.status == params.status)

    total = query.count()
    rentals = (query.order_by(Rental.created_at.desc(), Rental.id.desc())
               .offset((params.page - 1) * params.limit)
               .limit(params.limit)
               .all())
    return success({
        'rentals': [r.to_dict(include_payments=False) for r in rentals],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@agreement_bp.route('/<int:rental_id>')
@login_required
def get_agreement(rental_id):
    rental = get_rental_for_participant(rental_id)
    return success({'rental': rental.to_dict()})


@agreement_bp.route('/<int:rental_id>/sign', methods=['POST'])
@login_required
def sign_agreement(rental_id):
    parse_body(SignRequest)
    rental = get_rental_for_participant(rental_id, action='sign', lock=True)
    if rental.status not in ('pending', 'active'):
        raise StateConflictError('Agreement cannot be signed in its current status')

    role = rental.role_of(current_user.id)
    rental.sign(role)
    db.session.commit()

    logger.info('Rental %s signed by %s (status %s)', rental.id, role, rental.status)
    return success({'rental': rental.to_dict()}, message='Agreement signed successfully')


@agreement_bp.route('/<int:rental_id>/cancel', methods=['POST'])
@login_required
def cancel_agreement(rental_id):
    data = parse_body(CancelRequest)
    rental = get_rental_for_participant(rental_id, action='cancel', lock=True)
    if rental.status not in ('pending', 'active'):
        raise StateConflictError('Agreement cannot be cancelled in its current status')

    previous_status = rental.status
    rental.status = 'cancelled'
    rental.cancellation_reason = data.reason
    rental.cancelled_at = datetime.utcnow()
    rental.cancel_open_payments()

    # Acreage goes back to the listing only for agreements that were in force
    if previous_status == 'active' and rental.land is not None:
        land = rental.land
        land.available_acres = min(
            land.total_acres, round(land.available_acres + rental.rented_acres, 4)
        )
        land.land_status = 'available'

    db.session.commit()
    logger.info('Rental %s cancelled by user %s (was %s)', rental.id, current_user.id, previous_status)
    return success({'rental': rental.to_dict()}, message='Rental agreement cancelled successfully')


@agreement_bp.route('/<int:rental_id>/dispute', methods=['POST'])
@login_required
def raise_dispute(rental_id):
    data = parse_body(DisputeRequest)
    rental = get_rental_for_participant(rental_id, action='dispute', lock=True)
    if rental.status != 'active':
        raise StateConflictError('Only active agreements can be disputed')

    rental.disputes.append(RentalDispute(
        raised_by_id=current_user.id,
        issue=data.issue,
        description=data.description,
    ))
    rental.status = 'disputed'
    db.session.commit()

    logger.warning('Dispute raised on rental %s by user %s: %s', rental.id, current_user.id, data.issue)
    return success({'rental': rental.to_dict()}, message='Dispute raised successfully', status=201)


@agreement_bp.route('/<int:rental_id>/document')
@login_required
def download_agreement(rental_id):
    rental = get_rental_for_participant(rental_id)
    path = agreement_file_path(rental.agreement_url, current_app.config['AGREEMENTS_FOLDER'])
    if path is None or not path.is_file():
        raise NotFoundError('Agreement document not found')
    return send_file(
        path,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'rental_agreement_{rental.id}.pdf',
    )

# User Directory Routes
import logging
from datetime import datetime

from flask import Blueprint
from flask_login import login_required, current_user

from landrental.errors import ValidationError, NotFoundError
from landrental.models import db, User
from landrental.schemas import (
    ProfileUpdateRequest, DocumentsUploadRequest, RatingRequest, UserSearchParams,
)
from landrental.utils.api import (
    success, parse_body, parse_query, pagination_meta, user_type_required, get_or_404,
)

logger = logging.getLogger(__name__)

user_bp = Blueprint('user', __name__)


def _directory_query(user_type, params):
    query = User.query.filter(User.user_type == user_type, User.is_active.is_(True))
    if params.search:
        pattern = f'%{params.search}%'
        query = query.filter(db.or_(
            User.name.ilike(pattern),
            User.city.ilike(pattern),
            User.state.ilike(pattern),
        ))
    if params.state:
        query = query.filter(User.state.ilike(f'%{params.state}%'))
    if params.city:
        query = query.filter(User.city.ilike(f'%{params.city}%'))
    return query


@user_bp.route('/profile')
@login_required
def get_profile():
    return success({'user': current_user.to_private_dict()})


@user_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    # email, password, user type and verification are not part of the schema
    data = parse_body(ProfileUpdateRequest)
    fields = data.model_dump(exclude_unset=True, exclude={'address', 'bank_details'})
    for key, value in fields.items():
        setattr(current_user, key, value)

    if data.address is not None:
        for key, value in data.address.model_dump(exclude_unset=True).items():
            setattr(current_user, key, value)

    if data.bank_details is not None:
        bank = data.bank_details.model_dump(exclude_unset=True)
        if 'account_number' in bank:
            current_user.bank_account_number = bank['account_number']
        if 'ifsc_code' in bank:
            current_user.bank_ifsc_code = bank['ifsc_code']
        if 'account_holder_name' in bank:
            current_user.bank_account_holder = bank['account_holder_name']

    db.session.commit()
    return success({'user': current_user.to_private_dict()}, message='Profile updated successfully')


@user_bp.route('/upload-documents', methods=['POST'])
@login_required
@user_type_required('landowner')
def upload_documents():
    data = parse_body(DocumentsUploadRequest)
    now = datetime.utcnow().isoformat()
    documents = list(current_user.land_documents or [])
    for doc in data.documents:
        documents.append({
            'documentType': doc.document_type,
            'documentUrl': doc.document_url,
            'verified': False,
            'uploadedAt': now,
        })
    # Reassign so the JSON column is flagged dirty
    current_user.land_documents = documents
    db.session.commit()
    return success({'documents': documents}, message='Documents uploaded successfully')


@user_bp.route('/farmers')
@login_required
@user_type_required('landowner')
def list_farmers():
    params = parse_query(UserSearchParams)
    query = _directory_query('farmer', params)
    if params.experience is not None:
        query = query.filter(User.farming_experience >= params.experience)

    total = query.count()
    farmers = (query.order_by(User.rating.desc(), User.total_ratings.desc(), User.id)
               .offset((params.page - 1) * params.limit)
               .limit(params.limit)
               .all())
    return success({
        'farmers': [f.to_public_dict() for f in farmers],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@user_bp.route('/landowners')
@login_required
@user_type_required('farmer')
def list_landowners():
    params = parse_query(UserSearchParams)
    query = _directory_query('landowner', params)

    total = query.count()
    landowners = (query.order_by(User.is_verified.desc(), User.rating.desc(),
                                 User.total_ratings.desc(), User.id)
                  .offset((params.page - 1) * params.limit)
                  .limit(params.limit)
                  .all())
    return success({
        'landowners': [l.to_public_dict() for l in landowners],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@user_bp.route('/<int:user_id>')
def get_user(user_id):
    user = get_or_404(User, user_id, 'User not found')
    if not user.is_active:
        raise NotFoundError('User profile not available')
    return success({'user': user.to_public_dict()})


@user_bp.route('/rate/<int:user_id>', methods=['POST'])
@login_required
def rate_user(user_id):
    data = parse_body(RatingRequest)
    if user_id == current_user.id:
        raise ValidationError('You cannot rate yourself')

    target = db.session.get(User, user_id)
    if target is None or not target.is_active:
        raise NotFoundError('User not found')

    target.add_rating(data.rating)
    db.session.commit()
    logger.info('User %s rated user %s: %s', current_user.id, user_id, data.rating)
    return success(
        {'newRating': round(target.rating, 2), 'totalRatings': target.total_ratings},
        message='Rating submitted successfully',
    )

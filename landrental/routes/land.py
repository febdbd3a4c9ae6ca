# Land Listing Routes
import logging

from flask import Blueprint
from flask_login import login_required, current_user

from landrental.errors import ValidationError, AuthorizationError, NotFoundError, StateConflictError
from landrental.models import db, Land, Chat
from landrental.schemas import (
    LandCreateRequest, LandUpdateRequest, LandSearchParams, InquiryRequest,
    RatingRequest, PageParams,
)
from landrental.utils.api import (
    success, parse_body, parse_query, pagination_meta, paginate_list, user_type_required,
    get_or_404,
)
from landrental.utils.geo import haversine_km, bounding_box

logger = logging.getLogger(__name__)

land_bp = Blueprint('land', __name__)

SORT_COLUMNS = {
    'price': Land.price_per_acre,
    'acres': Land.available_acres,
    'createdAt': Land.created_at,
    'rating': Land.rating,
}


def _get_active_land(land_id):
    land = get_or_404(Land, land_id, 'Land listing not found')
    if not land.is_active:
        raise NotFoundError('Land listing is not available')
    return land


def _get_owned_land(land_id):
    land = get_or_404(Land, land_id, 'Land listing not found')
    if land.owner_id != current_user.id:
        raise AuthorizationError('Not authorized to modify this land listing')
    return land


def _check_acreage(land):
    if land.available_acres > land.total_acres:
        raise ValidationError('Available acres cannot exceed total acres')


def _apply_listing_fields(land, data):
    """Copy validated create/update fields onto the Land columns"""
    simple = data.model_dump(
        exclude_unset=True,
        exclude={'location', 'address', 'rental_terms', 'images'},
    )
    for key, value in simple.items():
        setattr(land, key, value)

    if data.location is not None:
        land.longitude, land.latitude = data.location.coordinates
    # Nested objects update only the keys that were sent
    if data.address is not None:
        for key, value in data.address.model_dump(exclude_unset=True).items():
            setattr(land, key, value)
    if data.rental_terms is not None:
        for key, value in data.rental_terms.model_dump(exclude_unset=True).items():
            setattr(land, key, value)
    if data.images is not None:
        land.images = [image.model_dump() for image in data.images]


def _search_query(params):
    query = Land.query.filter(Land.is_active.is_(True), Land.land_status == 'available')

    if params.min_price is not None:
        query = query.filter(Land.price_per_acre >= params.min_price)
    if params.max_price is not None:
        query = query.filter(Land.price_per_acre <= params.max_price)
    if params.min_acres is not None:
        query = query.filter(Land.available_acres >= params.min_acres)
    if params.max_acres is not None:
        query = query.filter(Land.available_acres <= params.max_acres)

    if params.soil_type:
        query = query.filter(Land.soil_type == params.soil_type)
    if params.water_source:
        query = query.filter(Land.water_source == params.water_source)
    if params.irrigation_type:
        query = query.filter(Land.irrigation_type == params.irrigation_type)

    for field in ('state', 'city', 'district', 'village'):
        value = getattr(params, field)
        if value:
            query = query.filter(getattr(Land, field).ilike(f'%{value}%'))

    if params.search:
        pattern = f'%{params.search}%'
        query = query.filter(db.or_(
            Land.title.ilike(pattern),
            Land.description.ilike(pattern),
            Land.village.ilike(pattern),
            Land.city.ilike(pattern),
            Land.district.ilike(pattern),
        ))
    return query


@land_bp.route('', methods=['POST'])
@login_required
@user_type_required('landowner')
def create_land():
    data = parse_body(LandCreateRequest)

    land = Land(owner_id=current_user.id)
    _apply_listing_fields(land, data)
    _check_acreage(land)

    db.session.add(land)
    db.session.commit()
    logger.info('Landowner %s created land %s', current_user.id, land.id)
    return success({'land': land.to_dict()}, message='Land listing created successfully', status=201)


@land_bp.route('', methods=['GET'])
def list_lands():
    params = parse_query(LandSearchParams)
    query = _search_query(params)

    geo_values = (params.latitude, params.longitude, params.radius)
    if any(v is not None for v in geo_values) and not all(v is not None for v in geo_values):
        raise ValidationError(errors=[{
            'field': 'radius',
            'message': 'latitude, longitude and radius must be provided together',
        }])

    if params.radius is not None:
        # Coarse box in SQL, exact great-circle distance in Python, nearest first
        min_lat, max_lat, min_lng, max_lng = bounding_box(params.latitude, params.longitude, params.radius)
        candidates = query.filter(
            Land.latitude.between(min_lat, max_lat),
            Land.longitude.between(min_lng, max_lng),
        ).all()
        matches = []
        for land in candidates:
            distance = haversine_km(params.latitude, params.longitude, land.latitude, land.longitude)
            if distance <= params.radius:
                matches.append((distance, land.id, land))
        matches.sort(key=lambda item: (item[0], item[1]))
        page_items, pagination = paginate_list(matches, params.page, params.limit)
        lands = [land.to_dict(distance_km=distance) for distance, _, land in page_items]
        return success({'lands': lands, 'pagination': pagination})

    column = SORT_COLUMNS[params.sort_by]
    order = column.asc() if params.sort_order == 'asc' else column.desc()
    total = query.count()
    lands = (query.order_by(order, Land.id)
             .offset((params.page - 1) * params.limit)
             .limit(params.limit)
             .all())
    return success({
        'lands': [land.to_dict() for land in lands],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@land_bp.route('/my-listings')
@login_required
@user_type_required('landowner')
def my_listings():
    params = parse_query(PageParams)
    query = Land.query.filter_by(owner_id=current_user.id)
    total = query.count()
    lands = (query.order_by(Land.created_at.desc(), Land.id.desc())
             .offset((params.page - 1) * params.limit)
             .limit(params.limit)
             .all())
    return success({
        'lands': [land.to_dict() for land in lands],
        'pagination': pagination_meta(params.page, params.limit, total),
    })


@land_bp.route('/<int:land_id>', methods=['GET'])
def get_land(land_id):
    land = _get_active_land(land_id)

    # Authenticated visitors other than the owner count as a view
    if current_user.is_authenticated and current_user.id != land.owner_id:
        land.increment_views()
        db.session.commit()

    return success({'land': land.to_dict()})


@land_bp.route('/<int:land_id>', methods=['PUT'])
@login_required
def update_land(land_id):
    land = _get_owned_land(land_id)
    data = parse_body(LandUpdateRequest)

    _apply_listing_fields(land, data)
    _check_acreage(land)

    db.session.commit()
    logger.info('Land %s updated by owner', land.id)
    return success({'land': land.to_dict()}, message='Land listing updated successfully')


@land_bp.route('/<int:land_id>', methods=['DELETE'])
@login_required
def delete_land(land_id):
    land = _get_owned_land(land_id)
    db.session.delete(land)
    db.session.commit()
    logger.info('Land %s deleted by owner %s', land_id, current_user.id)
    return success(message='Land listing deleted successfully')


@land_bp.route('/<int:land_id>/inquire', methods=['POST'])
@login_required
def inquire(land_id):
    data = parse_body(InquiryRequest)
    land = get_or_404(Land, land_id, 'Land listing not found')
    if not land.is_available():
        raise StateConflictError('Land is not available for inquiry')
    if land.owner_id == current_user.id:
        raise ValidationError('You cannot inquire about your own land')

    chat, created = Chat.find_or_create([current_user.id, land.owner_id], land_id=land.id, chat_type='inquiry')
    if created:
        chat.title = f'Inquiry: {land.title}'
    chat.add_message(current_user.id, data.message)
    land.increment_inquiries()
    db.session.commit()

    logger.info('User %s inquired about land %s (chat %s)', current_user.id, land.id, chat.id)
    return success({'chatId': chat.id}, message='Inquiry sent successfully')


@land_bp.route('/<int:land_id>/rate', methods=['POST'])
@login_required
def rate_land(land_id):
    data = parse_body(RatingRequest)
    land = _get_active_land(land_id)
    if land.owner_id == current_user.id:
        raise ValidationError('You cannot rate your own land')

    land.add_rating(data.rating)
    db.session.commit()
    return success(
        {'rating': round(land.rating, 2), 'totalRatings': land.total_ratings},
        message='Rating submitted successfully',
    )

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from flask import Blueprint, request, jsonify

from . import gcp_clients
from .config import MAX_PET_PHOTOS
from .exceptions import (
    FetchFailed, NotFoundError, PublishError, ServiceUnavailableError,
    StorageError, ValidationError,
)
from .models.pet import ContactInfo, ContactMethod, LostPet, PetSize, PetSpecies
from .models.search import Coordinate
from .models.sighting import PetSighting, SightingConfidence
from .search.engine import NearbySearchEngine
from .search.location import AuthorizationStatus, LocationTracker, QueueLocationProvider
from .services.geocoding_service import GeocodingService
from .services.notification_service import NotificationService
from .services.pet_service import PetService
from .services.profile_service import ProfileService
from .services.sighting_service import SightingService
from .services.storage_service import StorageService
from .utils.url_helpers import gs_to_public_url
from .utils.validators import (
    parse_flag, validate_bounds, validate_coordinates, validate_date,
    validate_image, validate_reward, validate_text,
)

main_bp = Blueprint('main', __name__)
logger = logging.getLogger(__name__)


@main_bp.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({"error": e.message, "field": e.field}), 400


@main_bp.errorhandler(NotFoundError)
def handle_not_found(e):
    return jsonify({"error": str(e)}), 404


@main_bp.errorhandler(FetchFailed)
def handle_fetch_failed(e):
    return jsonify({"error": "Could not load pet reports", "detail": str(e)}), 502


@main_bp.errorhandler(ServiceUnavailableError)
def handle_service_unavailable(e):
    return jsonify({"error": str(e)}), 503


@main_bp.errorhandler(StorageError)
def handle_storage_error(e):
    return jsonify({"error": "Failed to upload image"}), 500


@main_bp.errorhandler(PublishError)
def handle_publish_error(e):
    return jsonify({"error": "Failed to schedule notification"}), 500


@main_bp.route('/api/health')
def health():
    return jsonify({"status": "ok", "services": gcp_clients.available_services()}), 200


def _criteria_from_args(args) -> dict:
    changes = {
        "recent_only": parse_flag(args.get('recent_only')),
        "reward_only": parse_flag(args.get('reward_only')),
    }
    if args.get('radius_km'):
        changes["radius_km"] = args.get('radius_km')
    if args.get('species'):
        changes["species"] = args.get('species')
    if args.get('sizes'):
        changes["sizes"] = [s for s in args.get('sizes').split(',') if s.strip()]
    return changes


async def _track_and_refresh(engine, update):
    """
    Feed one location update through a LocationTracker and refresh.
    
    The tracker only logs refresh failures, so error events are collected
    here and the last one is re-raised.
    """
    if update is None:
        return await engine.refresh()
    
    errors = []
    
    def collect(event):
        if event.is_error:
            errors.append(event.error)
    
    unsubscribe = engine.subscribe(collect)
    provider = QueueLocationProvider()
    provider.push(update)
    provider.close()
    tracker = LocationTracker(engine, provider)
    try:
        await tracker.run()
    finally:
        unsubscribe()
    
    if errors:
        raise errors[-1]
    if not tracker.applied:
        # Authorized without a fix yet
        return await engine.refresh()
    return engine.result


@main_bp.route('/api/pets/nearby', methods=['GET'])
async def nearby_pets():
    engine = NearbySearchEngine(PetService())
    engine.update_criteria(**_criteria_from_args(request.args))
    
    lat = request.args.get('lat')
    lng = request.args.get('lng')
    if lat or lng:
        update = Coordinate(*validate_coordinates(lat, lng))
    else:
        update = _parse_choice(lambda v: AuthorizationStatus(v.strip().lower()),
                               request.args.get('location_status'), "location_status", None)
    
    result = await _track_and_refresh(engine, update)
    return jsonify(result.to_dict()), 200


def _parse_choice(parser, value, field, default):
    if not value:
        return default
    try:
        return parser(value)
    except ValueError as e:
        raise ValidationError(field, str(e))


def _parse_age(value) -> int:
    if not value:
        return 0
    try:
        age = int(value)
    except ValueError:
        raise ValidationError("age", f"Age must be a whole number, got {value!r}")
    if age < 0:
        raise ValidationError("age", "Age cannot be negative")
    return age


def _split_list(value) -> list[str]:
    return [item.strip() for item in (value or "").split(',') if item.strip()]


def _discard_uploads(storage: StorageService, urls: list) -> None:
    for url in urls:
        storage.delete_image(url)


@main_bp.route('/api/pets', methods=['POST'])
async def report_lost_pet():
    form = request.form
    
    name = validate_text(form.get('name'), field="name", max_length=100, required=True)
    lat, lng = validate_coordinates(form.get('lat'), form.get('lng'))
    species = _parse_choice(PetSpecies.parse, form.get('species'), "species", PetSpecies.OTHER)
    size = _parse_choice(PetSize.parse, form.get('size'), "size", PetSize.MEDIUM)
    method = _parse_choice(lambda v: ContactMethod(v.strip().capitalize()), form.get('contact_method'), "contact_method", ContactMethod.BOTH)
    contact_info = ContactInfo(
        phone=validate_text(form.get('phone'), field="phone", max_length=40),
        email=validate_text(form.get('email'), field="email", max_length=254),
        preferred_contact_method=method
    )
    fields = {
        "breed": validate_text(form.get('breed'), field="breed", max_length=100),
        "age": _parse_age(form.get('age')),
        "color": validate_text(form.get('color'), field="color", max_length=100),
        "description": validate_text(form.get('description')),
        "last_seen_date": validate_date(form.get('date')),
        "reward_amount": validate_reward(form.get('reward')),
        "distinctive_features": _split_list(form.get('distinctive_features')),
        "temperament": validate_text(form.get('temperament'), field="temperament", max_length=200),
    }
    address = validate_text(form.get('address'), field="address")
    
    images = [validate_image(f) for f in request.files.getlist('images') if f and f.filename]
    if len(images) > MAX_PET_PHOTOS:
        raise ValidationError("images", f"At most {MAX_PET_PHOTOS} photos per report")
    
    # Nothing is uploaded until the whole form has been validated
    pet_id = str(uuid.uuid4())
    storage = StorageService()
    photos = await asyncio.to_thread(storage.upload_pet_images, images, pet_id) if images else []
    
    try:
        location = await asyncio.to_thread(GeocodingService().reverse_geocode, lat, lng, address=address)
        pet = LostPet(
            id=pet_id,
            name=name,
            species=species,
            size=size,
            last_seen_location=location,
            contact_info=contact_info,
            owner_id=form.get('owner_id') or None,
            photos=photos,
            reported_date=datetime.now(timezone.utc),
            **fields
        )
        await PetService().save_lost_pet(pet)
    except Exception as e:
        if photos:
            logger.warning(f"Report {pet_id} was not saved, removing {len(photos)} uploaded photos: {e}")
            await asyncio.to_thread(_discard_uploads, storage, photos)
        raise
    
    return jsonify({"status": "success", "message": f"{pet.name} has been reported lost", "data": pet.to_dict()}), 201


@main_bp.route('/api/pets/<pet_id>', methods=['GET'])
async def get_pet(pet_id):
    pet = await PetService().get_pet(pet_id)
    return jsonify({"data": pet.to_dict()}), 200


@main_bp.route('/api/pets/<pet_id>/found', methods=['POST'])
async def mark_pet_found(pet_id):
    await PetService().update_pet_status(pet_id, is_active=False)
    return jsonify({"status": "success", "message": "Pet marked as found"}), 200


@main_bp.route('/api/pets/<pet_id>/sightings', methods=['POST'])
async def report_sighting(pet_id):
    form = request.form
    pet_service = PetService()
    pet = await pet_service.get_pet(pet_id)
    
    lat, lng = validate_coordinates(form.get('lat'), form.get('lng'))
    confidence = _parse_choice(SightingConfidence.parse, form.get('confidence'),
                               "confidence", SightingConfidence.MEDIUM)
    reporter_id = form.get('reporter_id') or None
    sighting_date = validate_date(form.get('date'))
    description = validate_text(form.get('description'))
    address = validate_text(form.get('address'), field="address")
    image_file = request.files.get('image')
    image = validate_image(image_file) if image_file and image_file.filename else None
    
    sighting_id = str(uuid.uuid4())
    storage = StorageService()
    photos = []
    if image:
        photos.append(await asyncio.to_thread(storage.upload_sighting_image, image, pet_id, sighting_id))
    
    try:
        location = await asyncio.to_thread(GeocodingService().reverse_geocode, lat, lng, address=address)
        sighting = PetSighting(
            id=sighting_id,
            pet_id=pet_id,
            sighting_date=sighting_date,
            location=location,
            description=description,
            reporter_id=reporter_id,
            confidence=confidence,
            photos=photos
        )
        await pet_service.submit_sighting(sighting)
    except Exception as e:
        if photos:
            logger.warning(f"Sighting {sighting_id} was not saved, removing its photo: {e}")
            await asyncio.to_thread(_discard_uploads, storage, photos)
        raise
    
    notified = True
    try:
        await asyncio.to_thread(_schedule_sighting_notifications, pet.name, reporter_id)
    except (PublishError, ServiceUnavailableError) as e:
        # The sighting is stored; a missed thank-you is not worth failing the request
        logger.warning(f"Could not schedule notifications for sighting {sighting.id}: {e}")
        notified = False
    
    return jsonify({
        "status": "success",
        "message": f"Sighting of {pet.name} reported!",
        "notifications_scheduled": notified,
        "data": sighting.to_dict()
    }), 201


def _schedule_sighting_notifications(pet_name, reporter_id):
    reporter = _load_profile(reporter_id)
    notifier = NotificationService()
    notifier.schedule_thank_you(pet_name, user_id=reporter_id, user=reporter)
    notifier.schedule_hero_reminder(pet_name, user_id=reporter_id, user=reporter)


def _load_profile(user_id):
    if not user_id:
        return None
    try:
        return ProfileService().get_profile(user_id)
    except NotFoundError:
        return None


@main_bp.route('/api/pets/<pet_id>/sightings', methods=['GET'])
def list_sightings(pet_id):
    bounds = validate_bounds(
        request.args.get('north', type=float),
        request.args.get('south', type=float),
        request.args.get('east', type=float),
        request.args.get('west', type=float)
    )
    page = SightingService().get_sightings(pet_id, bounds=bounds, cursor=request.args.get('cursor'))
    return jsonify(page), 200


@main_bp.route('/api/users/<user_id>/reports', methods=['GET'])
async def user_reports(user_id):
    pets, sightings = await asyncio.gather(
        PetService().fetch_user_pets(user_id),
        SightingService().fetch_user_sightings(user_id),
        return_exceptions=True
    )
    
    errors = []
    if isinstance(pets, Exception):
        logger.error(f"Failed to load pets for {user_id}: {pets}")
        errors.append(f"Failed to load your pets: {pets}")
        pets = []
    if isinstance(sightings, Exception):
        logger.error(f"Failed to load sightings for {user_id}: {sightings}")
        errors.append(f"Failed to load your sightings: {sightings}")
        sightings = []
    
    return jsonify({
        "pets": [p.to_dict() for p in pets],
        "sightings": [s.to_dict() for s in sightings],
        "errors": errors
    }), 200


@main_bp.route('/api/users/<user_id>/profile', methods=['GET'])
def get_profile(user_id):
    return jsonify({"data": ProfileService().get_profile(user_id).to_dict()}), 200


@main_bp.route('/api/users/<user_id>/profile', methods=['PUT'])
def update_profile(user_id):
    changes = request.get_json(silent=True)
    if not isinstance(changes, dict):
        raise ValidationError("profile", "Request body must be a JSON object")
    user = ProfileService().update_profile(user_id, changes)
    return jsonify({"status": "success", "data": user.to_dict()}), 200


@main_bp.route('/api/users/<user_id>/profile/photo', methods=['POST'])
def upload_profile_photo(user_id):
    image_file = validate_image(request.files.get('image'))
    image_url = StorageService().upload_profile_image(image_file, user_id)
    ProfileService().set_profile_image(user_id, image_url)
    return jsonify({"status": "success", "profile_image_url": gs_to_public_url(image_url)}), 200


@main_bp.route('/api/users/<user_id>/notifications/daily', methods=['POST'])
def enable_daily_motivation(user_id):
    message_id = NotificationService().schedule_daily_motivation(user_id=user_id, user=_load_profile(user_id))
    return jsonify({"status": "success", "scheduled": message_id is not None}), 200

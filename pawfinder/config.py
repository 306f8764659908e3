"""
Configuration constants for the PawFinder application.
"""

# Nearby search
DEFAULT_SEARCH_RADIUS_KM = 10.0
MIN_SEARCH_RADIUS_KM = 1.0
MAX_SEARCH_RADIUS_KM = 50.0
RECENT_WINDOW_DAYS = 7
EARTH_RADIUS_KM = 6371.0

# Pagination
DEFAULT_PAGE_LIMIT = 10
BATCH_SIZE = 50

# Image upload
MAX_IMAGE_SIZE_MB = 10
ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}
MAX_PET_PHOTOS = 5

# Validation
MAX_DESCRIPTION_LENGTH = 1000

# Firestore
LOST_PETS_COLLECTION = "lostPets"
SIGHTINGS_COLLECTION = "sightings"
USERS_COLLECTION = "users"

# Storage paths
PET_PHOTOS_PREFIX = "pet_photos"
PROFILE_PHOTOS_PREFIX = "profile_photos"

# Notifications
THANK_YOU_DELAY_SECONDS = 1.0
HERO_REMINDER_DELAY_SECONDS = 30.0
DAILY_MOTIVATION_HOUR = 9
DAILY_MOTIVATION_MINUTE = 0

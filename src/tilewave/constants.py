"""Contains global constants and default values used throughout the project."""

# === MODEL CONSTANTS ===

# Number of bytes kept from the edge hash of a tile.
FINGERPRINT_SIZE: int = 8

# Number of colors sampled along a tile edge to build its fingerprint.
FINGERPRINT_SAMPLES_DEFAULT: int = 3
FINGERPRINT_SAMPLES_MIN_LIMIT: int = 1

# Number of least significant bits dropped from each color channel before hashing.
FINGERPRINT_DISCARD_BITS_DEFAULT: int = 0
FINGERPRINT_DISCARD_BITS_MAX_LIMIT: int = 7

WFC_MAX_ATTEMPTS_DEFAULT: int = 200

TILEMAP_SIZE_DEFAULT: int = 8

RANDOM_SEED_MAX: int = 999999999

# === TILESET CONSTANTS ===

TILE_IMG_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".gif")

OUTPUT_IMG_PATH_DEFAULT: str = "./output/{seed}.png"

# === LOGGING CONSTANTS ===

LOGGER_NAME: str = "tilewave"
LOG_MAX_SIZE: int = 10 * 1024 * 1024
LOG_BACKUP_COUNT: int = 5

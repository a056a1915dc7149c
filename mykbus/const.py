"""
Constants.
"""

TIMETABLES_URL = "https://mykonosbus.com/bus-timetables/"

IMAGE_BASE_URL = "https://mykonosbusmap.com/images/"
PLACEHOLDER_IMAGE = "placeholder_01.svg"

NO_SERVICE_MESSAGE = "No service available—check back later"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0 Safari/537.36"
)

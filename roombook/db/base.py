# Import every model so relationship() strings resolve and metadata is complete
from roombook.db.session import Base  # noqa: F401
from roombook.models.admin import Admin  # noqa: F401
from roombook.models.building import Building  # noqa: F401
from roombook.models.room import Room  # noqa: F401
from roombook.models.booking import Booking  # noqa: F401

"""ORM models. Importing this package registers every table with Base.metadata."""
from classbook.models.user import User, UserRole  # noqa: F401
from classbook.models.classroom import Classroom, ClassroomPermission  # noqa: F401
from classbook.models.booking import Booking, BookingSlotClaim, BookingStatus  # noqa: F401
from classbook.models.settings import OperatingSettings  # noqa: F401

# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from app.models.invoice import Invoice  # noqa: F401
from app.models.payment import Payment  # noqa: F401
from app.models.user import User, UserContactLink  # noqa: F401

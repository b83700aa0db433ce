# /markhub-backend/app/db/base.py

# Central registry for all SQLAlchemy models. Importing them here ensures
# the Base metadata knows every table when Alembic or `create_all` runs.

from .base_class import Base

from .models.profile_models import Profile
from .models.submission_models import Submission

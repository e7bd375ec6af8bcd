# Parking Lot — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.visit_log import VisitLog     # noqa

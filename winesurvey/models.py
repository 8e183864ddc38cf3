import uuid
from datetime import datetime

from .extensions import db
from .questions import FIELDS, MULTIPLE, as_list


def _new_id():
    return str(uuid.uuid4())


class SurveyResponse(db.Model):
    __tablename__ = 'survey_responses'

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    # Demographics
    age_range = db.Column(db.String(50))
    gender = db.Column(db.String(50))
    marital_status = db.Column(db.String(50))
    household_size = db.Column(db.String(20))
    cep = db.Column(db.String(20), index=True)

    # Consumption habits
    frequency = db.Column(db.String(50))
    wine_style = db.Column(db.JSON, nullable=False, default=list)
    wine_type = db.Column(db.JSON, nullable=False, default=list)
    classification = db.Column(db.String(50))
    price_range = db.Column(db.String(50))
    alcohol_free_wine = db.Column(db.String(10))

    # Preferences
    grape_varieties = db.Column(db.Text)
    try_new_varieties = db.Column(db.String(10))
    preferred_origins = db.Column(db.JSON, nullable=False, default=list)
    purchase_channels = db.Column(db.JSON, nullable=False, default=list)
    attractive_factors = db.Column(db.JSON, nullable=False, default=list)

    # Novelties
    wine_events = db.Column(db.String(10))
    canned_wines = db.Column(db.String(100))
    natural_wines = db.Column(db.String(100))

    # Contact
    name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    phone = db.Column(db.String(30))
    communication_preference = db.Column(db.String(100))

    # Metadata
    user_agent = db.Column(db.String(512))
    ip_address = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    completed_at = db.Column(db.DateTime)

    def to_record(self) -> dict:
        """Plain dict used by the aggregation and report code."""
        record = {"id": self.id}
        for descriptor in FIELDS:
            value = getattr(self, descriptor.attr)
            if descriptor.kind == MULTIPLE:
                value = as_list(value)
            record[descriptor.attr] = value
        record["created_at"] = self.created_at
        record["completed_at"] = self.completed_at
        return record

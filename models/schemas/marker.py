from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.schemas.common import (
    validate_latitude,
    validate_longitude,
    validate_max_length,
    validate_not_blank,
)

OPTIONAL_TEXT_FIELDS = ("description", "strain", "image_url", "owner_name", "owner_contact")


def _strip_strings(data):
    if not isinstance(data, dict):
        return data
    return {k: (v.strip() if isinstance(v, str) else v) for k, v in data.items()}


class MarkerCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=[validate_not_blank, validate_max_length(100)])
    latitude = fields.Decimal(required=True, validate=validate_latitude)
    longitude = fields.Decimal(required=True, validate=validate_longitude)
    description = fields.String(allow_none=True)
    strain = fields.String(allow_none=True, validate=validate_max_length(100))
    quantity = fields.Integer(allow_none=True, validate=validate.Range(min=0))
    image_url = fields.String(allow_none=True)
    owner_name = fields.String(allow_none=True, validate=validate_max_length(100))
    owner_contact = fields.String(allow_none=True, validate=validate_max_length(50))

    @pre_load
    def normalize(self, data, **kwargs):
        data = _strip_strings(data)
        # Empty optional strings mean "not provided"
        if isinstance(data, dict):
            for key in OPTIONAL_TEXT_FIELDS:
                if data.get(key) == "":
                    data[key] = None
        return data


class MarkerUpdateSchema(Schema):
    # All optional, but validate if present
    class Meta:
        unknown = EXCLUDE

    name = fields.String(validate=[validate_not_blank, validate_max_length(100)])
    latitude = fields.Decimal(validate=validate_latitude)
    longitude = fields.Decimal(validate=validate_longitude)
    description = fields.String(allow_none=True)
    strain = fields.String(allow_none=True, validate=validate_max_length(100))
    quantity = fields.Integer(allow_none=True, validate=validate.Range(min=0))
    image_url = fields.String(allow_none=True)
    owner_name = fields.String(allow_none=True, validate=validate_max_length(100))
    owner_contact = fields.String(allow_none=True, validate=validate_max_length(50))

    @pre_load
    def normalize(self, data, **kwargs):
        data = _strip_strings(data)
        if isinstance(data, dict):
            for key in OPTIONAL_TEXT_FIELDS:
                if data.get(key) == "":
                    data[key] = None
        return data


class MarkerOutSchema(Schema):
    id = fields.String()
    short_code = fields.String()
    creator_id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    strain = fields.String(allow_none=True)
    quantity = fields.Integer(allow_none=True)
    latitude = fields.Decimal(as_string=True)
    longitude = fields.Decimal(as_string=True)
    image_url = fields.String(allow_none=True)
    owner_name = fields.String(allow_none=True)
    owner_contact = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class MarkerListItemSchema(Schema):
    # lightweight shape for map pins
    id = fields.String()
    short_code = fields.String()
    name = fields.String()
    latitude = fields.Decimal(as_string=True)
    longitude = fields.Decimal(as_string=True)

"""Task-related Marshmallow schemas."""

from datetime import timezone

from marshmallow import EXCLUDE, ValidationError, fields, validate

from taskboard.extensions import ma
from taskboard.models.task import TaskStatus


def _not_blank(value: str) -> None:
    if not value.strip():
        raise ValidationError("Must not be blank.")


class Deadline(fields.Date):
    """ISO date that also accepts a full ISO datetime and keeps its date part."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, str) and len(value) > 10:
            parsed = fields.DateTime()._deserialize(value, attr, data, **kwargs)
            return parsed.date()
        return super()._deserialize(value, attr, data, **kwargs)


STATUS_FIELD_OPTIONS = {"validate": validate.OneOf(TaskStatus.values())}


class TaskSchema(ma.Schema):
    """Schema for task serialization."""

    id = fields.Int(dump_only=True)
    user_id = fields.Int(dump_only=True, data_key="userId")
    title = fields.Str()
    description = fields.Str()
    status = fields.Str()
    order = fields.Int()
    deadline = fields.Date(allow_none=True)
    category = fields.Str(data_key="list")
    created_at = fields.DateTime(dump_only=True, format="iso")
    updated_at = fields.DateTime(dump_only=True, format="iso")


class TaskCreateSchema(ma.Schema):
    """Schema for task creation validation."""

    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=[validate.Length(min=1, max=255), _not_blank])
    description = fields.Str(load_default="", allow_none=True)
    status = fields.Str(required=True, **STATUS_FIELD_OPTIONS)
    order = fields.Int(strict=True, allow_none=True, validate=validate.Range(min=0))
    deadline = Deadline(allow_none=True)
    category = fields.Str(data_key="list", allow_none=True, validate=validate.Length(max=50))
    created_at = fields.AwareDateTime(allow_none=True, default_timezone=timezone.utc)
    updated_at = fields.AwareDateTime(allow_none=True, default_timezone=timezone.utc)


class TaskUpdateSchema(ma.Schema):
    """Schema for partial task updates.

    Every field is optional. A field that is absent or null keeps the
    stored value.
    """

    class Meta:
        unknown = EXCLUDE

    title = fields.Str(allow_none=True, validate=[validate.Length(min=1, max=255), _not_blank])
    description = fields.Str(allow_none=True)
    status = fields.Str(allow_none=True, **STATUS_FIELD_OPTIONS)
    order = fields.Int(strict=True, allow_none=True, validate=validate.Range(min=0))
    deadline = Deadline(allow_none=True)
    category = fields.Str(data_key="list", allow_none=True, validate=validate.Length(max=50))


class TaskStatusSchema(ma.Schema):
    """Schema for the status-change endpoint."""

    class Meta:
        unknown = EXCLUDE

    status = fields.Str(required=True, **STATUS_FIELD_OPTIONS)
    order = fields.Int(strict=True, allow_none=True, validate=validate.Range(min=0))
    deadline = Deadline(allow_none=True)
    category = fields.Str(data_key="list", allow_none=True, validate=validate.Length(max=50))

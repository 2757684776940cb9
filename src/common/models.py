import typing as t
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """UUID primary key plus creation and update stamps.

    Every save runs ``full_clean`` first, so model-level rules (check constraints, field
    validators, ``clean``) hold for writes made from services as well as from the admin.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.full_clean()
        super().save(*args, **kwargs)

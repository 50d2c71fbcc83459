from django.db import models
from django.utils import timezone
import uuid


class TimestampedModel(models.Model):
    """
    Common timestamps for all models
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_deleted=False)

    def deleted(self):
        return self.filter(is_deleted=True)

    def soft_delete(self):
        """
        Single UPDATE statement, so concurrent readers never see a half-deleted row.
        Returns the number of rows flagged.
        """
        now = timezone.now()
        return self.filter(is_deleted=False).update(
            is_deleted=True,
            deleted_at=now,
            updated_at=now,
        )


class SoftDeleteModel(models.Model):
    """
    Mark rows as deleted instead of actually deleting them.
    """
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

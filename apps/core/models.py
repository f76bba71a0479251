"""
Core App - Shared abstract models
"""
from django.db import models


class ActiveModel(models.Model):
    """Abstract base for catalog entities that are archived instead of deleted"""
    is_active = models.BooleanField(default=True, verbose_name='Activo')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def soft_delete(self):
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])

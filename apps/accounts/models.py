"""
Accounts App - Staff roles consumed by the inventory ledger

Authentication itself is Django's; the ledger only asks one question of an
actor: may it perform adjustments that require authorization?
"""
from django.conf import settings
from django.db import models


class StaffRole(models.TextChoices):
    ADMIN = 'ADMIN', 'Administrador'
    OPERATOR = 'OPERATOR', 'Operador'


class UserProfile(models.Model):
    """Role attached to each Django user (created automatically on signup)"""
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile'
    )
    role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        default=StaffRole.OPERATOR,
        verbose_name="Papel"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Perfil de Usuario"
        verbose_name_plural = "Perfiles de Usuario"

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"

    @property
    def is_admin(self):
        return self.role == StaffRole.ADMIN


def can_authorize_adjustments(user) -> bool:
    """Elevated authorization claim: superuser, ADMIN role or explicit permission"""
    if user is None or not user.is_authenticated or not user.is_active:
        return False
    if user.is_superuser:
        return True
    profile = getattr(user, 'profile', None)
    if profile is not None and profile.is_admin:
        return True
    return user.has_perm('inventory.authorize_adjustment')

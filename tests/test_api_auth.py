import pytest
from django.contrib.auth.models import AnonymousUser, Permission
from django.urls import reverse
from rest_framework import status

from apps.accounts.models import StaffRole, can_authorize_adjustments
from tests.factories import RawMaterialFactory, UserFactory


@pytest.mark.django_db
class TestAPIAuth:
    def test_obtain_token(self, client, user):
        """Verify that a user can obtain a JWT token"""
        url = reverse('token_obtain_pair')

        # Our EmailBackend allows 'username' to be the email
        response = client.post(url, {
            'username': user.email,
            'password': 'password123'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data
        assert 'refresh' in response.data

    def test_obtain_token_with_username(self, client, user):
        response = client.post(reverse('token_obtain_pair'), {
            'username': user.username,
            'password': 'password123'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK

    def test_wrong_password(self, client, user):
        response = client.post(reverse('token_obtain_pair'), {
            'username': user.email,
            'password': 'nope'
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_bearer_token_grants_access(self, client, user, kg):
        """A token obtained by e-mail opens the catalog"""
        RawMaterialFactory(name='Levadura', unit=kg)

        token_res = client.post(reverse('token_obtain_pair'), {
            'username': user.email,
            'password': 'password123'
        }, format='json')
        token = token_res.data['access']

        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = client.get(reverse('api-material-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [m['name'] for m in response.data['results']] == ['Levadura']

    def test_anonymous_is_rejected(self, client):
        response = client.get(reverse('api-material-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestAuthorizationClaim:

    def test_operator_lacks_claim(self, user):
        assert user.profile.role == StaffRole.OPERATOR
        assert can_authorize_adjustments(user) is False

    def test_admin_role_has_claim(self, manager):
        assert can_authorize_adjustments(manager) is True

    def test_superuser_has_claim(self):
        root = UserFactory(is_superuser=True)
        assert can_authorize_adjustments(root) is True

    def test_explicit_permission_grants_claim(self, user):
        user.user_permissions.add(Permission.objects.get(codename='authorize_adjustment'))
        user = type(user).objects.get(pk=user.pk)
        assert can_authorize_adjustments(user) is True

    def test_inactive_or_anonymous_lack_claim(self, manager):
        manager.is_active = False
        assert can_authorize_adjustments(manager) is False
        assert can_authorize_adjustments(AnonymousUser()) is False
        assert can_authorize_adjustments(None) is False

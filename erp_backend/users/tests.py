from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from documents.tests.factories import make_user


class MeEndpointTests(TestCase):
    """
    GUARANTEES:
    - The profile exposes tenant and effective capabilities
    - Anonymous callers are rejected
    """

    def setUp(self):
        self.client = APIClient()

    def test_me_returns_tenant_and_capabilities(self):
        user = make_user(role="driver", tenant_id="empaque-norte")
        self.client.force_authenticate(user=user)

        res = self.client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["tenant_id"], "empaque-norte")
        self.assertEqual(res.data["capabilities"], ["documents.view", "signatures.capture"])

    def test_me_requires_authentication(self):
        self.assertEqual(self.client.get("/api/auth/me/").status_code, 401)

    def test_blank_tenant_is_invalid(self):
        with self.assertRaises(ValidationError):
            make_user(tenant_id="   ")

from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone

from accounts.session import AUTH_OIDC, KEEPALIVE_TOKEN_KEY, SESSION_KEY, SessionContext


class SessionContextTests(TestCase):
    def test_token_ttl(self):
        now = timezone.now().timestamp()
        self.assertEqual(SessionContext(auth_method=AUTH_OIDC).token_ttl(), 0)
        self.assertEqual(SessionContext(auth_method=AUTH_OIDC, token_expires_at=now - 10).token_ttl(), 0)
        self.assertGreater(SessionContext(auth_method=AUTH_OIDC, token_expires_at=now + 300).token_ttl(), 290)

    def test_stale_session_payload_is_ignored(self):
        request = mock.Mock(session={SESSION_KEY: {'auth_method': 'form', 'unknown': 1}})
        self.assertIsNone(SessionContext.from_request(request))


class KeepaliveTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username='entry1', password='pw', utype='entry')
        self.client.force_login(self.user)

    def mint(self):
        return self.client.get('/api/keepalive/csrf').json()['csrf']

    def test_token_round_trip_rotates(self):
        token = self.mint()
        response = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN=token)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['ok'])
        self.assertGreater(body['ttl'], 0)
        self.assertNotEqual(body['csrf'], token)
        self.assertEqual(self.client.session[KEEPALIVE_TOKEN_KEY], body['csrf'])

        replay = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN=token)
        self.assertEqual(replay.status_code, 403)
        self.assertEqual(replay.json()['error'], 'CSRF')

    def test_no_token_minted(self):
        response = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN='x')
        self.assertEqual(response.status_code, 440)
        self.assertEqual(response.json()['error'], 'NO_CSRF')

    def test_foreign_origin(self):
        token = self.mint()
        response = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN=token, HTTP_ORIGIN='https://evil.example')
        self.assertEqual(response.json()['error'], 'BAD_ORIGIN')

    @override_settings(GATEPASS_KEEPALIVE_ALLOWED_ORIGINS=['https://portal.example'])
    def test_configured_origin(self):
        token = self.mint()
        response = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN=token, HTTP_ORIGIN='https://portal.example/')
        self.assertEqual(response.status_code, 200)

    def test_federated_ttl_comes_from_token(self):
        session = self.client.session
        session[SESSION_KEY] = {'auth_method': AUTH_OIDC, 'token_expires_at': timezone.now().timestamp() + 120}
        session.save()
        token = self.mint()
        ttl = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN=token).json()['ttl']
        self.assertLessEqual(ttl, 120)
        self.assertGreater(ttl, 100)

    def test_anonymous(self):
        self.client.logout()
        response = self.client.post('/api/keepalive', HTTP_X_CSRF_TOKEN='x')
        self.assertEqual(response.status_code, 401)


class LogoutTests(TestCase):
    def test_form_logout_goes_to_login(self):
        user = get_user_model().objects.create_user(username='entry1', password='pw', utype='entry')
        self.client.force_login(user)
        response = self.client.get('/logout')
        self.assertRedirects(response, '/login?logout=true', fetch_redirect_response=False)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_oidc_logout_ends_provider_session(self):
        user = get_user_model().objects.create_user(username='12345', password='', utype='GoogleUser')
        self.client.force_login(user)
        session = self.client.session
        session[SESSION_KEY] = {'auth_method': AUTH_OIDC, 'uid': '12345', 'id_token': 'tok'}
        session.save()
        with mock.patch('accounts.views.end_session_url', return_value='https://sso.example/logout?x=1') as end:
            response = self.client.get('/logout')
        self.assertEqual(response['Location'], 'https://sso.example/logout?x=1')
        self.assertEqual(end.call_args.args[1], 'http://testserver/login?logout=true')

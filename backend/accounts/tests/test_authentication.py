from unittest import mock

from django.contrib.auth import authenticate, get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings

from accounts import federated
from accounts.federated import DomainNotAllowed, FederatedIdentity, FederatedLoginError
from accounts.session import AUTH_FORM, AUTH_GOOGLE, AUTH_OIDC, AUTH_STUDENT, SESSION_KEY, SessionContext
from people.tests.student_tables import StudentRegistryMixin

User = get_user_model()


class LocalAccountTests(TestCase):
    def test_plaintext_password_match(self):
        User.objects.create_user(username='entry1', password='s3cret', utype='entry')
        user = authenticate(username='entry1', password='s3cret')
        self.assertEqual(user.username, 'entry1')
        self.assertIsNotNone(user.last_login)
        self.assertIsNone(authenticate(username='entry1', password='S3CRET'))
        self.assertIsNone(authenticate(username='nobody', password='s3cret'))
        self.assertIsNone(authenticate(username='entry1', password=''))

    def test_password_is_stored_as_issued(self):
        user = User.objects.create_user(username='entry1', password='s3cret', utype='entry')
        user.refresh_from_db()
        self.assertEqual(user.password, 's3cret')

    def test_only_admins_reach_the_admin_site(self):
        admin = User.objects.create_user(username='admin1', password='pw', utype='admin')
        viewer = User.objects.create_user(username='viewer1', password='pw', utype='viewer')
        self.assertTrue(admin.is_staff and admin.is_superuser)
        self.assertFalse(viewer.is_staff)

    def test_create_account_command(self):
        call_command('create_account', 'gate1', '--password', 'pw', '--type', 'searcher', '--full-name', 'Gate One')
        user = User.objects.get(username='gate1')
        self.assertEqual((user.utype, user.full_name, user.password), ('searcher', 'Gate One', 'pw'))
        call_command('create_account', 'gate1', '--password', 'pw2', '--type', 'admin')
        self.assertEqual(User.objects.get(username='gate1').utype, 'admin')


class StudentAccountTests(StudentRegistryMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.add_student('AG/23/218', '200012345678', 'Kamal Perera')

    def test_first_login_creates_local_account(self):
        user = authenticate(username='AG/23/218', password='200012345678')
        self.assertEqual(user.username, 'AG/23/218')
        self.assertEqual(user.utype, 'entry')
        self.assertEqual(user.full_name, 'Perera')
        self.assertEqual(user.password, '200012345678')

        # Later logins are served by the local table.
        with mock.patch('people.services.students.verify_login') as verify:
            self.assertIsNotNone(authenticate(username='AG/23/218', password='200012345678'))
        verify.assert_not_called()

    def test_wrong_nic(self):
        self.assertIsNone(authenticate(username='AG/23/218', password='000000000000'))
        self.assertFalse(User.objects.filter(username='AG/23/218').exists())

    def test_non_student_username_skips_registry(self):
        with mock.patch('people.services.students.verify_login') as verify:
            self.assertIsNone(authenticate(username='someone', password='200012345678'))
        verify.assert_not_called()

    def test_login_page_records_student_method(self):
        response = self.client.post('/login', {'username': 'AG/23/218', 'password': '200012345678'})
        self.assertRedirects(response, '/dashboard', fetch_redirect_response=False)
        context = SessionContext.from_request(response.wsgi_request)
        self.assertEqual(context.auth_method, AUTH_STUDENT)
        self.assertEqual(context.uid, 'AG/23/218')


@override_settings(GATEPASS_ALLOWED_EMAIL_DOMAINS=['pdn.ac.lk'])
class FederatedIdentityTests(TestCase):
    def test_domain_allow_list(self):
        self.assertTrue(federated.is_allowed_domain('a@pdn.ac.lk'))
        self.assertTrue(federated.is_allowed_domain('a@eng.pdn.ac.lk'))
        self.assertFalse(federated.is_allowed_domain('a@notpdn.ac.lk'))
        self.assertFalse(federated.is_allowed_domain('a@gmail.com'))
        self.assertFalse(federated.is_allowed_domain(''))

    def test_claims(self):
        identity = FederatedIdentity.from_claims({
            'uid': ' 12345 ', 'email': 'Ann@PDN.ac.lk', 'name': 'Ann Perera', 'name_with_initials': 'A. Perera',
        })
        self.assertEqual(identity.username, '12345')
        self.assertEqual(identity.email, 'ann@pdn.ac.lk')
        self.assertEqual(identity.display_name, 'A. Perera')
        self.assertEqual(FederatedIdentity(email='b@pdn.ac.lk').username, 'b@pdn.ac.lk')

    def test_accept_identity_upserts_without_changing_type(self):
        user = federated.accept_identity(FederatedIdentity(uid='12345', email='ann@pdn.ac.lk', name='Ann'))
        self.assertEqual(user.utype, 'GoogleUser')
        self.assertFalse(user.has_usable_password())

        user.utype = 'viewer'
        user.save()
        again = federated.accept_identity(FederatedIdentity(uid='12345', email='ann@pdn.ac.lk', name='Ann P'))
        self.assertEqual((again.pk, again.utype, again.full_name), (user.pk, 'viewer', 'Ann P'))

    def test_rejections(self):
        with self.assertRaises(DomainNotAllowed) as ctx:
            federated.accept_identity(FederatedIdentity(uid='1', email='x@gmail.com'))
        self.assertEqual(ctx.exception.error_code, 'domain')
        with self.assertRaises(DomainNotAllowed):
            federated.accept_identity(FederatedIdentity(uid='1'))
        self.assertFalse(User.objects.exists())
        self.assertTrue(issubclass(DomainNotAllowed, FederatedLoginError))

    def test_session_context_uses_earliest_expiry(self):
        identity = FederatedIdentity(uid='12345', email='ann@pdn.ac.lk', employee_type='Academic')
        context = federated.build_session_context(
            'keycloak', identity, {'expires_at': 2000, 'id_token': 'tok', 'userinfo': {'exp': 1500}},
        )
        self.assertEqual(context.auth_method, AUTH_OIDC)
        self.assertEqual(context.token_expires_at, 1500.0)
        self.assertEqual(context.id_token, 'tok')
        google = federated.build_session_context('google', identity, {})
        self.assertEqual(google.auth_method, AUTH_GOOGLE)
        self.assertIsNone(google.token_expires_at)

    def test_end_session_only_for_oidc(self):
        self.assertIsNone(federated.end_session_url(SessionContext(auth_method=AUTH_FORM), 'https://x/login'))
        client = mock.Mock()
        client.load_server_metadata.return_value = {'end_session_endpoint': 'https://sso.example/logout'}
        with mock.patch.object(federated, 'get_client', return_value=client):
            url = federated.end_session_url(SessionContext(auth_method=AUTH_OIDC, id_token='tok'), 'https://x/login')
        self.assertEqual(
            url,
            'https://sso.example/logout?post_logout_redirect_uri=https%3A%2F%2Fx%2Flogin&id_token_hint=tok',
        )


@override_settings(GATEPASS_ALLOWED_EMAIL_DOMAINS=['pdn.ac.lk'])
class OAuthCallbackTests(TestCase):
    def client_returning(self, userinfo):
        client = mock.Mock()
        client.authorize_access_token.return_value = {'userinfo': userinfo, 'expires_at': 9999999999}
        return client

    def test_successful_callback_logs_in(self):
        client = self.client_returning({'uid': '12345', 'email': 'ann@pdn.ac.lk', 'name': 'Ann'})
        with mock.patch('accounts.views.get_client', return_value=client):
            response = self.client.get('/login/oauth2/code/keycloak', {'code': 'abc', 'state': 'xyz'})
        self.assertRedirects(response, '/dashboard', fetch_redirect_response=False)
        session = self.client.session
        self.assertEqual(session[SESSION_KEY]['uid'], '12345')
        self.assertEqual(session[SESSION_KEY]['auth_method'], AUTH_OIDC)
        self.assertTrue(User.objects.filter(username='12345').exists())

    def test_foreign_domain_is_sent_back_to_login(self):
        client = self.client_returning({'email': 'x@gmail.com'})
        with mock.patch('accounts.views.get_client', return_value=client):
            response = self.client.get('/login/oauth2/code/google')
        self.assertRedirects(response, '/login?error=domain', fetch_redirect_response=False)
        self.assertFalse(User.objects.exists())

    def test_unconfigured_provider(self):
        with mock.patch('accounts.views.get_client', return_value=None):
            response = self.client.get('/oauth2/authorization/keycloak')
        self.assertRedirects(response, '/login?error=oauth', fetch_redirect_response=False)

    def test_login_page_error_messages(self):
        response = self.client.get('/login', {'error': 'domain'})
        self.assertEqual(response.context['login_error'], 'Access denied: Only @pdn.ac.lk emails are allowed')
        response = self.client.get('/login', {'logout': 'true'})
        self.assertEqual(response.context['login_message'], 'You have been logged out successfully')

from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase

from accounts.access import is_allowed, rule_for
from accounts.roles import Role, normalize_user_type, role_of
from accounts.services_dashboard import resolve_dashboard, tasks_for
from vehicles.models import Vehicle


class RoleTests(SimpleTestCase):
    def test_user_type_spellings(self):
        for spelling in ('non_academic', 'Non-Academic', 'NONACADEMIC', ' non academic '):
            self.assertEqual(normalize_user_type(spelling), 'NONACADEMIC')
        self.assertEqual(normalize_user_type(None), '')

    def test_every_utype_maps_to_one_role(self):
        self.assertEqual(Role.from_utype('admin'), Role.ADMIN)
        self.assertEqual(Role.from_utype('entry'), Role.ENTRY)
        self.assertEqual(Role.from_utype('academic'), Role.VIEWER)
        self.assertEqual(Role.from_utype('non_academic'), Role.VIEWER)
        self.assertEqual(Role.from_utype('searcher'), Role.SEARCHER)
        self.assertEqual(Role.from_utype('GoogleUser'), Role.SELF_SERVICE)
        self.assertEqual(Role.from_utype('something-new'), Role.SELF_SERVICE)

    def test_anonymous_has_no_role(self):
        self.assertIsNone(role_of(None))
        self.assertIsNone(role_of(SimpleNamespace(is_authenticated=False)))


class RouteRuleTests(SimpleTestCase):
    def test_more_specific_prefix_wins(self):
        self.assertFalse(is_allowed('/view/images/delete', Role.VIEWER))
        self.assertTrue(is_allowed('/view/images', Role.VIEWER))
        self.assertTrue(is_allowed('/view/images/upload', Role.VIEWER))
        self.assertFalse(is_allowed('/vehicle/certificate/delete', Role.ENTRY))
        self.assertTrue(is_allowed('/vehicle/certificate/download', Role.ENTRY))

    def test_public_routes(self):
        for path in ('/', '/login', '/logout', '/oauth2/authorization/google', '/static/css/gatepass.css'):
            self.assertTrue(is_allowed(path, None), path)
        self.assertTrue(rule_for('/login').is_public)

    def test_prefix_does_not_match_longer_words(self):
        self.assertEqual(rule_for('/loginx').prefix, '')
        self.assertFalse(is_allowed('/loginx', None))

    def test_role_matrix(self):
        self.assertTrue(is_allowed('/vehicle/insert', Role.ENTRY))
        self.assertFalse(is_allowed('/vehicle/insert', Role.VIEWER))
        self.assertTrue(is_allowed('/vehicle/search', Role.SEARCHER))
        self.assertFalse(is_allowed('/vehicle/search', Role.ENTRY))
        self.assertTrue(is_allowed('/admin/backup', Role.ADMIN))
        self.assertFalse(is_allowed('/qr/generate', Role.VIEWER))
        self.assertTrue(is_allowed('/my/vehicle', Role.SELF_SERVICE))
        self.assertFalse(is_allowed('/api/vehicle/check', Role.SELF_SERVICE))
        self.assertTrue(is_allowed('/api/user/info', Role.SELF_SERVICE))
        self.assertFalse(is_allowed('/dashboard', None))


class AccessMiddlewareTests(TestCase):
    def setUp(self):
        self.viewer = get_user_model().objects.create_user(username='viewer1', password='pw', utype='viewer')

    def test_page_redirects_to_login(self):
        response = self.client.get('/vehicle/insert?id=1')
        self.assertRedirects(response, '/login?next=%2Fvehicle%2Finsert%3Fid%3D1', fetch_redirect_response=False)

    def test_api_without_session_is_401(self):
        response = self.client.get('/api/persons/list')
        self.assertEqual(response.status_code, 401)

    def test_wrong_role_page_is_403(self):
        self.client.force_login(self.viewer)
        response = self.client.get('/vehicle/insert')
        self.assertEqual(response.status_code, 403)
        self.assertTemplateUsed(response, 'errors/403.html')

    def test_wrong_role_api_is_json_403(self):
        self.client.force_login(self.viewer)
        response = self.client.get('/api/vehicle/check', {'vehicleNo': 'A'})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error'], 'FORBIDDEN')


class DashboardTests(TestCase):
    def test_admin_sees_every_task_and_pending_count(self):
        admin = get_user_model().objects.create_user(username='admin1', password='pw', utype='admin')
        Vehicle.objects.create(emp_id='1', vehicle_no='A-1')
        data = resolve_dashboard(admin)
        self.assertEqual(data['role'], 'ADMIN')
        self.assertEqual(data['pending_count'], 1)
        self.assertEqual(len(data['tasks']), 7)

    def test_self_service_dashboard(self):
        member = get_user_model().objects.create_user(username='x@pdn.ac.lk', password='', utype='GoogleUser')
        data = resolve_dashboard(member)
        self.assertEqual([task['url'] for task in data['tasks']], ['/my/vehicle'])
        self.assertIsNone(data['pending_count'])

    def test_every_task_is_reachable_by_its_role(self):
        for role in Role:
            self.assertTrue(tasks_for(role), f'{role} has no dashboard tasks')
            for task in tasks_for(role):
                self.assertTrue(is_allowed(task.url, role), f'{role} -> {task.url}')

    def test_dashboard_page_and_api(self):
        entry = get_user_model().objects.create_user(username='entry1', password='pw', utype='entry')
        self.client.force_login(entry)
        page = self.client.get('/dashboard')
        self.assertEqual(page.status_code, 200)
        self.assertEqual(page.context['role'], 'ENTRY')
        api = self.client.get('/api/user/dashboard').json()
        self.assertEqual(api['user']['username'], 'entry1')
        self.assertEqual(api['tasks'][0]['url'], '/vehicle/insert')

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase

from people.models import Staff, TemporaryStaff, Visitor
from vehicles.models import Vehicle

from .student_tables import StudentRegistryMixin


class PeopleViewTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.admin = User.objects.create_user(username='admin1', password='pw', utype='admin')
        self.searcher = User.objects.create_user(username='gate1', password='pw', utype='searcher')
        self.academic = User.objects.create_user(username='dean1', password='pw', utype='academic')
        self.entry = User.objects.create_user(username='entry1', password='pw', utype='entry')
        Staff.objects.create(salary_date=date(2024, 2, 29), emp_no='00001', emp_name='Ann Perera',
                             designation='Lecturer', employee_type='Academic', date_of_birth='1970-05-17')
        Staff.objects.create(salary_date=date(2024, 2, 29), emp_no='00002', emp_name='Bob Silva',
                             employee_type='Non Academic')
        TemporaryStaff.objects.create(salary_date=date(2024, 2, 29), emp_no='C01', emp_name='Dan Casual',
                                      category='Casual')
        self.visitor = Visitor.objects.create(name='Eve Visitor')
        Vehicle.objects.create(emp_id='00001', vehicle_no='CAB-1234', approval_status='Approved')

    def test_person_search_found(self):
        self.client.force_login(self.searcher)
        response = self.client.get('/search/person', {'id': '00001'})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.context['found'])
        self.assertEqual(response.context['person'].name, 'Ann Perera')
        self.assertTrue(response.context['qr_image'].startswith('data:image/png;base64,'))
        self.assertContains(response, 'CAB-1234')

    def test_person_search_flags_expired_visitor_pass(self):
        self.client.force_login(self.searcher)
        expired = Visitor.objects.create(name='Old Guest', date_from=date(2020, 1, 1), date_to=date(2020, 1, 31))
        self.assertContains(self.client.get('/search/person', {'id': f'VIS_{expired.id}'}), '(expired)')
        self.assertNotContains(self.client.get('/search/person', {'id': f'VIS_{self.visitor.id}'}), '(expired)')

    def test_person_search_not_found(self):
        self.client.force_login(self.searcher)
        response = self.client.get('/search/person', {'id': '99999'})
        self.assertFalse(response.context['found'])
        self.assertContains(response, 'No record found for: 99999')

    def test_person_search_is_searcher_or_admin_only(self):
        self.client.force_login(self.entry)
        self.assertEqual(self.client.get('/search/person', {'id': '00001'}).status_code, 403)

    def test_anonymous_is_sent_to_login(self):
        response = self.client.get('/search/person', {'id': '00001'})
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response['Location'].startswith('/login?next='))

    def test_staff_detail(self):
        self.client.force_login(self.admin)
        response = self.client.get('/staff/detail', {'empno': '00001'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['staff'].emp_name, 'Ann Perera')
        self.assertEqual(response.context['staff'].expiry_date, date(2035, 5, 17))

    def test_staff_detail_scoped_for_academic_viewer(self):
        self.client.force_login(self.academic)
        self.assertEqual(self.client.get('/staff/detail', {'empno': '00001'}).status_code, 200)
        self.assertEqual(self.client.get('/staff/detail', {'empno': '00002'}).status_code, 403)

    def test_staff_detail_unknown(self):
        self.client.force_login(self.admin)
        response = self.client.get('/staff/detail', {'empno': '77777'})
        self.assertEqual(response.context['error'], 'Staff member not found: 77777')

    def test_staff_search(self):
        self.client.force_login(self.admin)
        response = self.client.get('/staff/search', {'query': 'dan'})
        self.assertEqual([d.emp_no for d in response.context['results']], ['C01'])

    def test_view_detail_with_selected_vehicle(self):
        self.client.force_login(self.admin)
        response = self.client.get('/view/detail', {'id': '00001', 'vehicleno': 'cab-1234', 'category': 'auto'})
        self.assertEqual(response.context['person'].id, '00001')
        self.assertEqual(response.context['selected_vehicle'].vehicle_no, 'CAB-1234')

    def test_view_detail_missing_person(self):
        self.client.force_login(self.admin)
        response = self.client.get('/view/detail', {'id': 'nobody'})
        self.assertEqual(response.context['error'], 'Person not found: nobody')


class PeopleApiTests(StudentRegistryMixin, TestCase):
    def setUp(self):
        super().setUp()
        User = get_user_model()
        self.admin = User.objects.create_user(username='admin1', password='pw', utype='admin')
        self.entry = User.objects.create_user(username='entry1', password='pw', utype='entry')
        Staff.objects.create(salary_date=date(2024, 2, 29), emp_no='00001', emp_name='Ann Perera',
                             nic='801234567V', employee_type='Academic')
        self.add_student('AG/23/218', '200012345678', 'Kamal Perera', Email='kamal@students.pdn.ac.lk')
        self.client.force_login(self.admin)

    def test_resolve_staff_and_student(self):
        staff = self.client.get('/api/person/resolve', {'id': '00001'}).json()
        self.assertEqual(staff['redirectUrl'], '/search/person?id=00001')
        self.assertEqual(staff['type'], 'Permanent Staff')
        student = self.client.get('/api/person/resolve', {'id': 'AG/23/218'}).json()
        self.assertEqual(student['redirectUrl'], '/student/detail?regno=AG/23/218')

    def test_resolve_reports_visitor_pass_validity(self):
        expired = Visitor.objects.create(name='Old Guest', date_from=date(2020, 1, 1), date_to=date(2020, 1, 31))
        open_pass = Visitor.objects.create(name='New Guest')
        self.assertIs(self.client.get('/api/person/resolve', {'id': f'VIS_{expired.id}'}).json()['isValid'], False)
        self.assertIs(self.client.get('/api/person/resolve', {'id': f'VIS_{open_pass.id}'}).json()['isValid'], True)

    def test_resolve_errors(self):
        self.assertEqual(self.client.get('/api/person/resolve').status_code, 400)
        self.assertEqual(self.client.get('/api/person/resolve', {'id': 'x'}).json(),
                         {'found': False, 'error': 'Person not found'})

    def test_person_master_splits_vehicles(self):
        Vehicle.objects.create(emp_id='00001', vehicle_no='CAB-1234')
        data = self.client.get('/api/person/master', {'empid': '00001'}).json()
        self.assertEqual(data['person']['name'], 'Ann Perera')
        self.assertNotIn('vehicles', data['person'])
        self.assertEqual([v['vehicleNo'] for v in data['vehicles']], ['CAB-1234'])

    def test_user_info(self):
        data = self.client.get('/api/user/info', {'userid': 'AG/23/218'}).json()
        self.assertEqual(data['category'], 'student')
        self.assertEqual(data['data']['name'], 'Kamal Perera')

    def test_user_email(self):
        student = self.client.get('/api/user/email', {'userid': 'AG/23/218', 'type': 'student'}).json()
        self.assertEqual(student['email'], 'kamal@students.pdn.ac.lk')
        bad_nic = self.client.get('/api/user/email', {'userid': '00001', 'type': 'staff', 'nic': 'x'}).json()
        self.assertEqual(bad_nic['error'], 'NIC verification failed')
        staff = self.client.get('/api/user/email', {'userid': '00001', 'type': 'staff', 'nic': '801234567v'}).json()
        self.assertEqual(staff['status'], 'Login confirmed')
        missing_nic = self.client.get('/api/user/email', {'userid': '00001', 'type': 'staff'})
        self.assertEqual(missing_nic.status_code, 400)

    def test_persons_list_for_admin(self):
        data = self.client.get('/api/persons/list', {'category': 'permanent'}).json()
        self.assertEqual(data, [{'id': '00001', 'label': '00001 - Ann Perera (Permanent)'}])

    def test_persons_list_forbidden_for_entry(self):
        self.client.force_login(self.entry)
        response = self.client.get('/api/persons/list', {'category': 'permanent'})
        self.assertEqual(response.status_code, 403)

    def test_student_cascade(self):
        self.assertEqual(self.client.get('/api/students/faculties').json(), ['AG'])
        self.assertEqual(self.client.get('/api/students/years', {'faculty': 'AG'}).json(), ['2023'])
        self.assertEqual(self.client.get('/api/students/years').status_code, 400)
        self.assertEqual(
            self.client.get('/api/students/list', {'faculty': 'AG', 'year': '2023'}).json(),
            [{'id': 'AG/23/218', 'label': 'AG/23/218 - Kamal Perera'}],
        )

from unittest import mock

from django.test import TestCase, override_settings

from people.services import students

from .student_tables import StudentRegistryMixin


@override_settings(GATEPASS_STUDENT_IMAGE_URL='https://registry.example/photo?regno=')
class StudentRegistryTests(StudentRegistryMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.insert('faculty', Fac_Code='AG', Fac_name='Agriculture')
        self.insert('course', Course_ID='C1', Course_name='BSc Agriculture')
        self.insert('district', Dist_No='21', District='Kandy')
        self.add_student('AG/23/218', '200012345678', 'Kamal Perera',
                         Email='kamal@students.pdn.ac.lk', Mobile='0771234567', Dist_No='21')
        self.add_student('AG/22/010', '199912345678', 'Nimal Silva')
        self.add_student('SC/23/001', '200111111111', 'Sunil Fernando', faculty='SC')
        self.add_student('AG/23/999', '200199999999', 'Left Student', status='LEFT')
        self.insert('studclass', Reg_No='AG/23/218', Semester='1', RegDate='2024-01-10')
        self.insert('studclass', Reg_No='AG/23/218', Semester='2', RegDate='2024-07-01')

    def test_basic_info_for_registered_student(self):
        student = students.basic_info('AG/23/218')
        self.assertEqual(student.full_name, 'Kamal Perera')
        self.assertEqual(student.faculty_name, 'Agriculture')
        self.assertEqual(student.course_name, 'BSc Agriculture')
        self.assertEqual(student.semester_name, 'Second')
        self.assertEqual(student.image_url, 'https://registry.example/photo?regno=AG%2F23%2F218')

    def test_basic_info_ignores_unregistered_and_unknown(self):
        self.assertIsNone(students.basic_info('AG/23/999'))
        self.assertIsNone(students.basic_info('AG/23/000'))
        self.assertIsNone(students.basic_info('  '))

    def test_basic_info_falls_back_to_codes(self):
        student = students.basic_info('SC/23/001')
        self.assertEqual(student.faculty_name, 'SC')
        self.assertEqual(student.semester_name, '')

    def test_full_detail_includes_unregistered(self):
        detail = students.full_detail('AG/23/999')
        self.assertEqual(detail.status, 'LEFT')
        self.assertFalse(detail.is_registered)
        self.assertEqual(detail.email, '')

    def test_full_detail_history(self):
        detail = students.full_detail('AG/23/218')
        self.assertTrue(detail.is_registered)
        self.assertEqual(detail.email, 'kamal@students.pdn.ac.lk')
        self.assertEqual(detail.district, 'Kandy')
        self.assertEqual(detail.semester, '2')
        self.assertEqual(detail.semester_registered_on, '2024-07-01')
        self.assertEqual(detail.semester_history, ['Semester First - 2024-01-10', 'Semester Second - 2024-07-01'])

    def test_is_registered(self):
        self.assertTrue(students.is_registered('AG/23/218'))
        self.assertFalse(students.is_registered('AG/23/999'))
        self.assertFalse(students.is_registered('AG/23/21'))

    def test_verify_login(self):
        login = students.verify_login('AG/23/218', '200012345678')
        self.assertEqual(login.last_name, 'Perera')
        self.assertIsNone(students.verify_login('AG/23/218', '000000000000'))
        self.assertIsNone(students.verify_login('AG/23/999', '200199999999'))
        self.assertIsNone(students.verify_login('', ''))

    def test_search_by_reg_no_or_name(self):
        self.assertEqual([s.reg_no for s in students.search('AG/23')], ['AG/23/218', 'AG/23/999'])
        self.assertEqual([s.reg_no for s in students.search('Silva')], ['AG/22/010'])
        self.assertEqual(students.search(''), [])

    def test_search_limit_is_applied_by_the_query(self):
        self.assertEqual([s.reg_no for s in students.search('AG/', limit=2)], ['AG/22/010', 'AG/23/218'])
        with mock.patch.object(students, '_fetch_all', wraps=students._fetch_all) as fetch:
            students.search('AG/', limit=1)
        sql, params = fetch.call_args.args
        self.assertIn('LIMIT %s', sql)
        self.assertEqual(params[-1], 1)

    def test_cascading_lists(self):
        self.assertEqual(students.faculties(), ['AG', 'SC'])
        self.assertEqual(students.years_by_faculty('AG'), ['2022', '2023'])
        options = students.students_by_faculty_and_year('AG', '2023')
        self.assertEqual([(o.id, o.label) for o in options], [('AG/23/218', 'AG/23/218 - Kamal Perera')])
        self.assertEqual(students.registered_reg_nos(), ['AG/22/010', 'AG/23/218', 'SC/23/001'])


class StudentHelperTests(TestCase):
    def test_split_reg_no(self):
        self.assertEqual(students.split_reg_no('AG/23/218'), ('AG', '2023'))
        self.assertEqual(students.split_reg_no('MED/2019/4'), ('MED', '2019'))
        self.assertEqual(students.split_reg_no(''), ('UNKNOWN', '0000'))

    def test_semester_name(self):
        self.assertEqual(students.semester_name('1'), 'First')
        self.assertEqual(students.semester_name(12), 'Twelfth')
        self.assertEqual(students.semester_name('13'), '13')

    def test_image_url_without_reg_no(self):
        self.assertEqual(students.image_url(None), students.DEFAULT_IMAGE_URL)

    def test_missing_registry_counts_as_no_match(self):
        # No registry tables exist in this test case.
        self.assertIsNone(students.basic_info('AG/23/218'))
        self.assertFalse(students.is_registered('AG/23/218'))
        self.assertEqual(students.faculties(), [])

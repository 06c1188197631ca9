import shutil
import tempfile
from pathlib import Path
from types import SimpleNamespace

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings

from vehicles.services import certificates
from vehicles.services.certificates import CertificateError


def pdf(name='rc.pdf', content=b'%PDF-1.4 test', content_type='application/pdf'):
    return SimpleUploadedFile(name, content, content_type=content_type)


class CertificateStoreTests(SimpleTestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.root, ignore_errors=True)
        override = override_settings(GATEPASS_CERTIFICATE_ROOT=self.root, GATEPASS_CERTIFICATE_MAX_BYTES=1024)
        override.enable()
        self.addCleanup(override.disable)

    def test_directory_layout(self):
        self.assertEqual(certificates.relative_dir('student', 'AG/23/218'), Path('Student/AG/2023'))
        self.assertEqual(certificates.relative_dir('Casual', 'C01'), Path('Staff/Casual/C01'))
        self.assertEqual(certificates.relative_dir('visitor', '42'), Path('Visitor/42'))
        self.assertEqual(certificates.relative_dir('other', 'x/y'), Path('Misc/x_y'))

    def test_save_and_list(self):
        path = certificates.save_certificate(pdf('my rc.pdf'), 'student', 'AG/23/218', 'CAB-1234')
        self.assertTrue(path.is_file())
        self.assertEqual(path.parent, self.root / 'Student' / 'AG' / '2023')
        self.assertTrue(path.name.startswith('AG_23_218_CAB-1234_'))
        self.assertTrue(path.name.endswith('_my_rc.pdf'))
        self.assertEqual(certificates.list_certificates('student', 'AG/23/218'), [path.name])

    def test_shared_student_folder_is_filtered_by_owner(self):
        certificates.save_certificate(pdf(), 'student', 'AG/23/218', 'CAB-1')
        certificates.save_certificate(pdf(), 'student', 'AG/23/219', 'CAB-2')
        names = certificates.list_certificates('student', 'AG/23/219')
        self.assertEqual(len(names), 1)
        self.assertIn('_CAB-2_', names[0])

    def test_grouping_by_vehicle(self):
        certificates.save_certificate(pdf(), 'permanent', '12345', 'CAB-1')
        certificates.save_certificate(pdf(), 'permanent', '12345', 'WP-2')
        vehicles = [SimpleNamespace(vehicle_no='CAB-1'), SimpleNamespace(vehicle_no='XX-9')]
        grouped = certificates.certificates_by_vehicle('permanent', '12345', vehicles)
        self.assertEqual(len(grouped['CAB-1']), 1)
        self.assertEqual(grouped['XX-9'], [])

    def test_plate_inside_another_plate_or_upload_name(self):
        kept = [
            certificates.save_certificate(pdf('scan_1234_front.pdf'), 'permanent', '12345', 'WP CAB-1234').name,
            certificates.save_certificate(pdf(), 'permanent', '12345', 'WP CAB-1234').name,
        ]
        own = certificates.save_certificate(pdf(), 'permanent', '12345', 'CAB-1234').name

        grouped = certificates.certificates_by_vehicle(
            'permanent', '12345', [SimpleNamespace(vehicle_no='CAB-1234'), SimpleNamespace(vehicle_no='1234')])
        self.assertEqual(grouped['CAB-1234'], [own])
        self.assertEqual(grouped['1234'], [])

        self.assertEqual(certificates.delete_for_vehicle('permanent', '12345', '1234'), 0)
        self.assertEqual(certificates.delete_for_vehicle('permanent', '12345', 'CAB-1234'), 1)
        self.assertEqual(certificates.list_certificates('permanent', '12345'), sorted(kept))

    def test_rename_rewrites_only_the_prefix(self):
        name = certificates.save_certificate(pdf('CAB-1_copy.pdf'), 'visitor', '42', 'CAB-1').name
        self.assertEqual(certificates.rename_for_vehicle('visitor', '42', 'CAB-1', 'CAB-2'), 1)
        renamed = certificates.list_certificates('visitor', '42')
        self.assertEqual(renamed, ['42_CAB-2_' + name[len('42_CAB-1_'):]])
        self.assertTrue(renamed[0].endswith('_CAB-1_copy.pdf'))

    def test_upload_rules(self):
        with self.assertRaisesMessage(CertificateError, 'Certificate file is required'):
            certificates.validate_upload(None)
        with self.assertRaisesMessage(CertificateError, 'Only PDF files are allowed'):
            certificates.validate_upload(pdf('rc.png', content_type='image/png'))
        with self.assertRaisesMessage(CertificateError, 'Certificate exceeds'):
            certificates.validate_upload(pdf(content=b'x' * 2048))

    def test_resolve_refuses_traversal(self):
        path = certificates.save_certificate(pdf(), 'visitor', '42', 'CAB-1')
        self.assertEqual(certificates.resolve('visitor', '42', f'../../{path.name}'), path.resolve())
        with self.assertRaises(CertificateError):
            certificates.resolve('visitor', '42', '..')
        with self.assertRaises(CertificateError):
            certificates.resolve('visitor', '42', 'missing.pdf')

    def test_delete(self):
        path = certificates.save_certificate(pdf(), 'visitor', '42', 'CAB-1')
        self.assertTrue(certificates.delete_certificate('visitor', '42', path.name))
        self.assertFalse(certificates.delete_certificate('visitor', '42', path.name))

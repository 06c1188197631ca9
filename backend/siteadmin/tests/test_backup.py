import shutil
import subprocess
import tempfile
from pathlib import Path
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings

from siteadmin.services import backup

MYSQL = {
    'ENGINE': 'django.db.backends.mysql',
    'NAME': 'vehicle_qr_db',
    'USER': 'gate',
    'PASSWORD': 'secret',
    'HOST': 'db.local',
    'PORT': '3306',
}


def _completed(returncode=0, stderr=b''):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stderr=stderr)


class BackupServiceTests(TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.root, ignore_errors=True)
        override = override_settings(GATEPASS_BACKUP_ROOT=self.root, GATEPASS_DUMP_BINARY='mysqldump')
        override.enable()
        self.addCleanup(override.disable)

    def test_mysql_command_keeps_password_off_argv(self):
        argv, env = backup.dump_command(MYSQL)
        self.assertEqual(argv[0], 'mysqldump')
        self.assertIn('--single-transaction', argv)
        self.assertIn('--routines', argv)
        self.assertIn('--triggers', argv)
        self.assertEqual(argv[-1], 'vehicle_qr_db')
        self.assertNotIn('secret', ' '.join(argv))
        self.assertEqual(env, {'MYSQL_PWD': 'secret'})

    def test_unsupported_backend(self):
        with self.assertRaises(backup.BackupError):
            backup.dump_command({'ENGINE': 'django.db.backends.sqlite3', 'NAME': 'db.sqlite3'})

    def test_create_backup_success(self):
        def fake_run(argv, stdout, **kwargs):
            stdout.write(b'-- dump\n')
            return _completed()

        with mock.patch.object(backup, 'dump_command', return_value=(['mysqldump', 'db'], {})), \
                mock.patch.object(backup.subprocess, 'run', side_effect=fake_run):
            path = backup.create_backup()

        self.assertTrue(path.is_file())
        self.assertEqual(path.suffix, '.sql')
        self.assertEqual(path.read_bytes(), b'-- dump\n')
        self.assertEqual([info.filename for info in backup.list_backups()], [path.name])

    def test_failed_dump_removes_partial_file(self):
        with mock.patch.object(backup, 'dump_command', return_value=(['mysqldump', 'db'], {})), \
                mock.patch.object(backup.subprocess, 'run', return_value=_completed(2, b'Access denied')):
            with self.assertRaises(backup.BackupError) as ctx:
                backup.create_backup()

        self.assertIn('exit code 2', str(ctx.exception))
        self.assertEqual(list(self.root.iterdir()), [])

    def test_backup_path_uses_base_name_only(self):
        (self.root / 'a.sql').write_text('x')
        self.assertEqual(backup.backup_path('../../a.sql'), self.root / 'a.sql')
        with self.assertRaises(backup.BackupError):
            backup.backup_path('a.txt')
        with self.assertRaises(backup.BackupError):
            backup.backup_path('missing.sql')

    def test_delete_backup(self):
        (self.root / 'a.sql').write_text('x')
        self.assertTrue(backup.delete_backup('a.sql'))
        self.assertFalse(backup.delete_backup('a.sql'))

    def test_formatted_size(self):
        info = backup.BackupInfo('a.sql', 2048, None)
        self.assertEqual(info.formatted_size, '2.0 KB')

    def test_command_reports_failure(self):
        with self.assertRaises(CommandError):
            call_command('backup_database')


class BackupViewTests(TestCase):
    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.root, ignore_errors=True)
        override = override_settings(GATEPASS_BACKUP_ROOT=self.root)
        override.enable()
        self.addCleanup(override.disable)
        User = get_user_model()
        self.admin = User.objects.create_user(username='admin1', password='pw', utype='admin')
        self.entry = User.objects.create_user(username='entry1', password='pw', utype='entry')

    def test_download(self):
        (self.root / 'vehicle_qr_db_2025-01-01_00-00-00.sql').write_text('-- dump')
        self.client.force_login(self.admin)
        response = self.client.get('/admin/backup/download', {'filename': 'vehicle_qr_db_2025-01-01_00-00-00.sql'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(b''.join(response.streaming_content), b'-- dump')

    def test_download_missing_is_404(self):
        self.client.force_login(self.admin)
        response = self.client.get('/admin/backup/download', {'filename': '../settings.py'})
        self.assertEqual(response.status_code, 404)

    def test_non_admin_is_forbidden(self):
        self.client.force_login(self.entry)
        response = self.client.get('/admin/backup')
        self.assertEqual(response.status_code, 403)

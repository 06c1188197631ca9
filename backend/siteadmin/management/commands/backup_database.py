from django.core.management.base import BaseCommand, CommandError

from siteadmin.services import backup


class Command(BaseCommand):
    help = 'Dump the application database into GATEPASS_BACKUP_ROOT'

    def add_arguments(self, parser):
        parser.add_argument('--database', default='default', help='Connection alias to dump')
        parser.add_argument('--list', action='store_true', help='List existing backups instead of creating one')

    def handle(self, *args, **options):
        if options['list']:
            for info in backup.list_backups():
                self.stdout.write(f'{info.filename}\t{info.formatted_size}\t{info.modified:%Y-%m-%d %H:%M}')
            return

        try:
            path = backup.create_backup(options['database'])
        except backup.BackupError as exc:
            raise CommandError(str(exc))
        self.stdout.write(self.style.SUCCESS(f'Backup written to {path}'))

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User, UserType


class Command(BaseCommand):
    help = 'Create or update a local operator account (admin, entry, viewer, searcher)'

    def add_arguments(self, parser):
        parser.add_argument('username', help='Login name')
        parser.add_argument('--password', '-p', dest='password', help='Password stored for the account', required=True)
        parser.add_argument('--type', '-t', dest='utype', default=UserType.ENTRY,
                            choices=[choice.value for choice in UserType], help='User type (role tag)')
        parser.add_argument('--full-name', dest='full_name', default='', help='Display name')
        parser.add_argument('--email', dest='email', default='', help='Contact e-mail')

    def handle(self, *args, **options):
        username = (options['username'] or '').strip()
        if not username:
            raise CommandError('username must not be blank')

        with transaction.atomic():
            user, created = User.objects.get_or_create(username=username, defaults={'utype': options['utype']})
            user.utype = options['utype']
            user.set_password(options['password'])
            if options['full_name']:
                user.full_name = options['full_name']
            if options['email']:
                user.email = options['email']
            user.save()

        verb = 'Created' if created else 'Updated'
        self.stdout.write(self.style.SUCCESS(f'{verb} account {user.username} ({user.utype})'))

from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings

from siteadmin.models import EmailContact
from siteadmin.services import bulk_email


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class BulkEmailTests(TestCase):
    def setUp(self):
        EmailContact.objects.create(nic='801234567V', emp_no='01234', email='a@pdn.ac.lk')
        EmailContact.objects.create(nic='811234567V', emp_no='01235', email='b@pdn.ac.lk')
        EmailContact.objects.create(nic='821234567V', emp_no='01236', email=None)
        EmailContact.objects.create(nic='831234567V', emp_no='01237', email='')

    def test_defaults_to_all_contacts_with_email(self):
        result = bulk_email.send_bulk_email('Subject', '<b>Hello</b>')
        self.assertEqual((result.sent, result.failed), (2, 0))
        self.assertEqual(sorted(message.to[0] for message in mail.outbox), ['a@pdn.ac.lk', 'b@pdn.ac.lk'])
        self.assertEqual(mail.outbox[0].body, 'Hello')
        self.assertEqual(mail.outbox[0].alternatives[0][0], '<b>Hello</b>')

    def test_explicit_recipients(self):
        result = bulk_email.send_bulk_email('Subject', 'Body', ['c@pdn.ac.lk', ' '])
        self.assertEqual(result.sent, 1)
        self.assertEqual(mail.outbox[0].to, ['c@pdn.ac.lk'])

    def test_failures_are_counted(self):
        original = mail.EmailMultiAlternatives.send

        def flaky(message, fail_silently=False):
            if message.to == ['b@pdn.ac.lk']:
                raise OSError('connection reset')
            return original(message, fail_silently=fail_silently)

        with mock.patch.object(bulk_email.EmailMultiAlternatives, 'send', flaky):
            result = bulk_email.send_bulk_email('Subject', 'Body')

        self.assertEqual((result.sent, result.failed), (1, 1))
        self.assertEqual(result.errors, ['b@pdn.ac.lk'])
        self.assertIn('Failed: b@pdn.ac.lk', result.message)

    def test_page_sends_and_redirects(self):
        admin = get_user_model().objects.create_user(username='admin1', password='pw', utype='admin')
        self.client.force_login(admin)

        page = self.client.get('/admin/email')
        self.assertEqual(page.status_code, 200)
        self.assertEqual(page.context['contact_count'], 2)

        response = self.client.post('/admin/email', {'subject': 'Hi', 'body': 'Body', 'recipients': ''})
        self.assertRedirects(response, '/admin/email', fetch_redirect_response=False)
        self.assertEqual(len(mail.outbox), 2)

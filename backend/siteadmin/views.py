from __future__ import annotations

import logging

from django.contrib import messages
from django.http import FileResponse, Http404, HttpRequest
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from .forms import BulkEmailForm
from .models import EmailContact
from .services import backup
from .services.bulk_email import send_bulk_email

logger = logging.getLogger(__name__)


@require_GET
def backup_list(request: HttpRequest):
    return render(request, 'siteadmin/backup.html', {'backups': backup.list_backups()})


@require_POST
def backup_create(request: HttpRequest):
    try:
        path = backup.create_backup()
    except backup.BackupError as exc:
        messages.error(request, f'Backup failed: {exc}')
    else:
        logger.info('Backup created by %s: %s', request.user.username, path.name)
        messages.success(request, f'Backup created successfully: {path.name}')
    return redirect('/admin/backup')


@require_GET
def backup_download(request: HttpRequest):
    """GET /admin/backup/download?filename="""
    try:
        path = backup.backup_path(request.GET.get('filename', ''))
    except backup.BackupError as exc:
        raise Http404(str(exc))
    return FileResponse(open(path, 'rb'), as_attachment=True, filename=path.name, content_type='application/sql')


@require_POST
def backup_delete(request: HttpRequest):
    filename = request.POST.get('filename', '')
    if backup.delete_backup(filename):
        messages.success(request, f'Backup deleted: {filename}')
    else:
        messages.error(request, f'Backup not found: {filename}')
    return redirect('/admin/backup')


def bulk_email(request: HttpRequest):
    """GET shows the form and contact list; POST sends."""
    form = BulkEmailForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        recipients = form.cleaned_data['recipients']
        result = send_bulk_email(form.cleaned_data['subject'], form.cleaned_data['body'], recipients)
        if result.total == 0:
            messages.error(request, 'No email contacts found in the database.')
        elif result.failed:
            messages.error(request, result.message)
        else:
            messages.success(request, result.message)
        return redirect('/admin/email')

    contacts = EmailContact.objects.exclude(email__isnull=True).exclude(email='')
    return render(request, 'siteadmin/email.html', {
        'form': form,
        'contacts': contacts,
        'contact_count': contacts.count(),
    })

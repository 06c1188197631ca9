from django import forms

from .services.bulk_email import DEFAULT_BODY, DEFAULT_SUBJECT


class BulkEmailForm(forms.Form):
    subject = forms.CharField(max_length=255, initial=DEFAULT_SUBJECT)
    body = forms.CharField(widget=forms.Textarea(attrs={'rows': 10}), initial=DEFAULT_BODY,
                           help_text='HTML is allowed.')
    recipients = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'rows': 3}),
        help_text='Comma or newline separated. Leave empty to mail every contact on file.',
    )

    def clean_recipients(self):
        raw = self.cleaned_data.get('recipients') or ''
        addresses = [part.strip() for part in raw.replace('\n', ',').split(',') if part.strip()]
        for address in addresses:
            forms.EmailField().clean(address)
        return addresses or None

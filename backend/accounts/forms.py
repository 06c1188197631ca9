from __future__ import annotations

from django import forms
from django.contrib.auth.forms import AuthenticationForm


class GatePassAuthenticationForm(AuthenticationForm):
    username = forms.CharField(
        label='Username / Registration No',
        widget=forms.TextInput(attrs={'autofocus': True, 'autocomplete': 'username'}),
    )

    error_messages = {
        'invalid_login': 'Invalid username or password',
        'inactive': 'This account is inactive.',
    }

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django import forms

from .models import User, UserType


class GatePassUserChangeForm(forms.ModelForm):
    """Edits the stored password as plain text, matching how it is checked."""

    password = forms.CharField(required=False, widget=forms.PasswordInput(render_value=True))

    class Meta:
        model = User
        fields = '__all__'


class GatePassUserCreationForm(forms.ModelForm):
    password = forms.CharField(widget=forms.PasswordInput)

    class Meta:
        model = User
        fields = ('username', 'full_name', 'utype', 'password')

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data['password'])
        if commit:
            user.save()
        return user


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    form = GatePassUserChangeForm
    add_form = GatePassUserCreationForm
    list_display = ('username', 'full_name', 'utype', 'email', 'is_active', 'last_login', 'create_date')
    list_filter = ('utype', 'is_active')
    search_fields = ('username', 'full_name', 'email')
    ordering = ('username',)
    readonly_fields = ('last_login', 'create_date')

    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        ('Profile', {'fields': ('full_name', 'email', 'utype')}),
        ('Status', {'fields': ('is_active', 'last_login', 'create_date')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'full_name', 'utype', 'password'),
        }),
    )

    def get_changeform_initial_data(self, request):
        initial = super().get_changeform_initial_data(request)
        initial.setdefault('utype', UserType.ENTRY)
        return initial

from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import RegexValidator
from django.utils import timezone
from django.utils.crypto import constant_time_compare


class UsernameValidator(RegexValidator):
    """Usernames may be staff logins, e-mail addresses or registration numbers (AG/23/218)."""
    regex = r'^[\w\s.@+/-]+$'
    message = 'Enter a valid username. This value may contain letters, numbers, spaces, and @/./+/-/_// characters.'
    flags = 0


class UserType(models.TextChoices):
    ADMIN = 'admin', 'Administrator'
    ENTRY = 'entry', 'Entry operator'
    VIEWER = 'viewer', 'Viewer'
    SEARCHER = 'searcher', 'Searcher'
    ACADEMIC = 'academic', 'Academic image viewer'
    NON_ACADEMIC = 'non_academic', 'Non-academic image viewer'
    GOOGLE_USER = 'GoogleUser', 'Federated user'
    STUDENT = 'student', 'Student'
    USER = 'user', 'User'


class GatePassUserManager(UserManager):
    """Creates accounts whose password goes through ``User.set_password`` unhashed."""

    def create_user(self, username, email=None, password=None, **extra_fields):
        user = self.model(username=username, email=self.normalize_email(email or ''), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('utype', UserType.ADMIN)
        return self.create_user(username, email, password, **extra_fields)


class User(AbstractUser):
    """
    Local login identity.

    Rows are created manually for operators, on the first student login and
    on the first federated login. ``password`` holds the secret exactly as
    issued because historical accounts were stored that way; see
    ``set_password``/``check_password``.
    """
    username = models.CharField(
        max_length=150,
        unique=True,
        help_text='Required. 150 characters or fewer.',
        validators=[UsernameValidator()],
        error_messages={
            'unique': 'A user with that username already exists.',
        },
    )
    full_name = models.CharField('Full name', max_length=255, blank=True, default='')
    utype = models.CharField(
        'User type',
        max_length=32,
        choices=UserType.choices,
        default=UserType.GOOGLE_USER,
        db_index=True,
    )
    create_date = models.DateTimeField(default=timezone.now)

    objects = GatePassUserManager()

    class Meta:
        db_table = 'user'
        ordering = ['username']

    def __str__(self):
        return self.username

    @property
    def role(self):
        from .roles import Role

        return Role.from_utype(self.utype)

    @property
    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username

    # Legacy credential storage: compared as stored, never hashed here.
    def set_password(self, raw_password):
        self.password = raw_password or ''
        self._password = raw_password

    def check_password(self, raw_password):
        if raw_password is None or not self.password:
            return False
        return constant_time_compare(self.password, raw_password)

    def save(self, *args, **kwargs):
        # Only administrators reach the Django admin site.
        is_admin = self.utype == UserType.ADMIN
        self.is_staff = is_admin
        self.is_superuser = is_admin
        super().save(*args, **kwargs)

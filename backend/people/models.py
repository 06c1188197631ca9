from datetime import date

from django.db import models


class PayrollSnapshot(models.Model):
    """Columns shared by the permanent and temporary payroll feeds.

    Both tables are append-only: one row per employee per pay period, so the
    current record for an employee is the row with the latest ``salary_date``.
    """
    salary_date = models.DateField(db_column='SalDt')
    emp_no = models.CharField(max_length=20, db_column='EmpNo', db_index=True)
    emp_name = models.CharField(max_length=255, db_column='EmpNm', blank=True, null=True)
    designation = models.CharField(max_length=255, db_column='DesgNm', blank=True, null=True)
    category = models.CharField(max_length=100, db_column='EmpCat1Nm', blank=True, null=True)
    nic = models.CharField(max_length=20, db_column='NIC', blank=True, null=True)
    sex = models.CharField(max_length=10, db_column='Sex', blank=True, null=True)
    department = models.CharField(max_length=255, db_column='BuNm', blank=True, null=True)
    department_code = models.CharField(max_length=20, db_column='BuCd', blank=True, null=True)
    employee_type = models.CharField(max_length=50, db_column='EmpTypCd', blank=True, null=True)
    # Stored as text (yyyy-mm-dd) in the feed; malformed values do occur.
    date_of_birth = models.CharField(max_length=20, db_column='DtBirth', blank=True, null=True)

    class Meta:
        abstract = True

    def __str__(self):
        return f'{self.emp_no} {self.emp_name or ""} @ {self.salary_date}'


class Staff(PayrollSnapshot):
    pk = models.CompositePrimaryKey('salary_date', 'emp_no')
    branch_name = models.CharField(max_length=255, db_column='BrnNm', blank=True, null=True)

    NON_ACADEMIC = 'Non Academic'

    class Meta:
        db_table = 'slipspaymentsdetailall'
        verbose_name = 'permanent staff snapshot'

    @property
    def is_academic(self) -> bool:
        return (self.employee_type or '').strip().lower() == 'academic'


class TemporaryStaff(PayrollSnapshot):
    # category is part of the key: the same employee can appear under several.
    pk = models.CompositePrimaryKey('salary_date', 'emp_no', 'category')
    category = models.CharField(max_length=100, db_column='EmpCat1Nm')

    CATEGORIES = ('Temporary', 'Casual', 'Contract', 'Institute')

    class Meta:
        db_table = 'temporarystaff'
        verbose_name = 'temporary staff snapshot'
        verbose_name_plural = 'temporary staff snapshots'


class Visitor(models.Model):
    id = models.BigAutoField(primary_key=True, db_column='ID')
    name = models.CharField(max_length=255, db_column='Name')
    reason = models.CharField(max_length=255, db_column='Reason', blank=True, default='')
    date_from = models.DateField(db_column='DateFrom', null=True, blank=True)
    date_to = models.DateField(db_column='DateTo', null=True, blank=True)

    class Meta:
        db_table = 'visitor'
        ordering = ['-id']

    def __str__(self):
        return f'{self.id} - {self.name}'

    def is_valid_on(self, day: date) -> bool:
        if self.date_from and day < self.date_from:
            return False
        if self.date_to and day > self.date_to:
            return False
        return True

from django.db import models


class EmailContact(models.Model):
    """Mailing list for circulars sent from the bulk email page."""
    nic = models.CharField(max_length=12, primary_key=True, db_column='NIC')
    emp_no = models.CharField(max_length=5, db_column='EmpNo', blank=True, null=True)
    email = models.CharField(max_length=100, db_column='Email', blank=True, null=True)

    class Meta:
        db_table = 'emailtab'
        ordering = ['emp_no']

    def __str__(self):
        return f'{self.emp_no or self.nic} <{self.email or "-"}>'

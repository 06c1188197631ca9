from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='EmailContact',
            fields=[
                ('nic', models.CharField(db_column='NIC', max_length=12, primary_key=True, serialize=False)),
                ('emp_no', models.CharField(blank=True, db_column='EmpNo', max_length=5, null=True)),
                ('email', models.CharField(blank=True, db_column='Email', max_length=100, null=True)),
            ],
            options={
                'db_table': 'emailtab',
                'ordering': ['emp_no'],
            },
        ),
    ]

# Generated manually for branches app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('branches', '0002_branch_created_by'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BranchSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('company_name', models.CharField(max_length=150)),
                ('company_address', models.CharField(max_length=255)),
                ('contact_numbers', models.JSONField(blank=True, default=list)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('pan_number', models.CharField(blank=True, max_length=30)),
                ('reg_no', models.CharField(blank=True, max_length=50)),
                ('default_currency', models.CharField(default='NPR', max_length=3)),
                ('ticket_rules', models.JSONField(blank=True, default=list)),
                ('country', models.CharField(default='Nepal', max_length=60)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='venue_settings', to='branches.branch')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='branch_settings_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'branch_settings',
                'verbose_name_plural': 'branch settings',
            },
        ),
    ]

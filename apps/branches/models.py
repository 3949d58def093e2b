from datetime import time
from django.conf import settings
from django.db import models
import uuid


class Branch(models.Model):
    """A physical venue location. Every ticket, sale and expense belongs to one."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    branch_name = models.CharField(max_length=100, unique=True)
    location = models.CharField(max_length=200)
    contact_number = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    manager = models.CharField(max_length=100, blank=True)

    opening_time = models.TimeField(default=time(9, 0))
    closing_time = models.TimeField(default=time(20, 0))

    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='branches_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'branches'
        ordering = ['branch_name']
        indexes = [
            models.Index(fields=['is_active'], name='branches_is_active_idx'),
        ]

    def __str__(self):
        return self.branch_name


class BranchSettings(models.Model):
    """
    Receipt header and house rules for one branch.

    Created with defaults on first read; only admins change it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    branch = models.OneToOneField(
        Branch,
        on_delete=models.CASCADE,
        related_name='venue_settings'
    )

    company_name = models.CharField(max_length=150)
    company_address = models.CharField(max_length=255)
    contact_numbers = models.JSONField(default=list, blank=True)
    email = models.EmailField(blank=True)
    pan_number = models.CharField(max_length=30, blank=True)
    reg_no = models.CharField(max_length=50, blank=True)
    default_currency = models.CharField(max_length=3, default='NPR')
    ticket_rules = models.JSONField(default=list, blank=True)
    country = models.CharField(max_length=60, default='Nepal')

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='branch_settings_updated'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'branch_settings'
        verbose_name_plural = 'branch settings'

    def __str__(self):
        return f"Settings for {self.branch.branch_name}"
